#!/usr/bin/env python3
"""Run the Gemini balance proxy with uvicorn.

Usage:
  python proxy.py [--config configs/config_default.yaml] [--host 0.0.0.0] [--port 8000]
"""

from __future__ import annotations

import argparse
import os

import uvicorn


def main() -> int:
    parser = argparse.ArgumentParser(description="Gemini balance proxy")
    parser.add_argument(
        "--config",
        help="Path to the YAML config (default: GEMINI_BALANCE_CONFIG or configs/config_default.yaml)",
    )
    parser.add_argument("--host", help="Override the listen host")
    parser.add_argument("--port", type=int, help="Override the listen port")
    args = parser.parse_args()

    # The app module reads these at import time
    if args.config:
        os.environ["GEMINI_BALANCE_CONFIG"] = args.config
    if args.host:
        os.environ["GEMINI_BALANCE_HOST"] = args.host
    if args.port:
        os.environ["GEMINI_BALANCE_PORT"] = str(args.port)

    from gemini_balance.main import settings

    uvicorn.run(
        "gemini_balance.main:app",
        host=settings.listen_host,
        port=settings.listen_port,
        log_level="debug" if settings.debug else "info",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

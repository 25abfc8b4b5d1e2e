"""gemini-balance-proxy

A small reverse proxy for the Gemini API that spreads calls across several
API keys supplied by the client in one ``x-goog-api-key`` header.

This module provides:
- ProxyPipeline: header filtering, key selection, forwarding, response rewriting
- ProxySettings: immutable settings loaded from YAML and the environment
- create_app: the FastAPI application

Example:
    >>> from gemini_balance.main import app
    >>> import uvicorn
    >>> uvicorn.run(app, host="0.0.0.0", port=8000)
"""

from .config_loader import load_config
from .core import ProxyPipeline, ResponseRewriter
from .logging import logger, setup_logging
from .main import app, create_app
from .settings import ProxySettings, load_settings

__all__ = [
    "app",
    "create_app",
    "load_config",
    "load_settings",
    "logger",
    "ProxyPipeline",
    "ProxySettings",
    "ResponseRewriter",
    "setup_logging",
]

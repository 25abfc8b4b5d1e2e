"""Process-wide proxy settings.

Everything the request pipeline treats as a constant (backend origin, header
names, prefixes and exclusion sets) lives on one frozen ``ProxySettings``
instance that is built once at start-up and handed to the pipeline.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from .config_loader import load_config
from .core.exceptions import ConfigurationError

logger = logging.getLogger("gemini-balance.settings")

DEFAULT_BACKEND_ORIGIN = "https://generativelanguage.googleapis.com"
DEFAULT_INDEX_MESSAGE = "Proxy is Running!  More Details: https://github.com/tech-shrimp/gemini-balance-lite"

CREDENTIAL_HEADER = "x-goog-api-key"
VENDOR_HEADER_PREFIX = "x-goog-"
CONTENT_HEADER_PREFIX = "content-"
UPLOAD_URL_HEADER = "x-goog-upload-url"

REQUEST_EXCLUDED_HEADERS = frozenset({
    "host",
    "connection",
    "origin",
    "referer",
    "user-agent",
    "accept-encoding",
})

RESPONSE_EXCLUDED_HEADERS = frozenset({
    "transfer-encoding",
    "connection",
    "keep-alive",
    "content-encoding",
})


@dataclass(frozen=True)
class ProxySettings:
    listen_host: str = "0.0.0.0"
    listen_port: int = 8000
    backend_origin: str = DEFAULT_BACKEND_ORIGIN
    timeout_seconds: Optional[float] = None
    public_base_url: Optional[str] = None
    index_message: str = DEFAULT_INDEX_MESSAGE
    verify_path: str = "/v1beta/models"
    verify_timeout_seconds: float = 30.0
    debug: bool = False
    log_file: Optional[str] = None
    credential_header: str = CREDENTIAL_HEADER
    vendor_header_prefix: str = VENDOR_HEADER_PREFIX
    content_header_prefix: str = CONTENT_HEADER_PREFIX
    upload_url_header: str = UPLOAD_URL_HEADER
    request_excluded_headers: frozenset[str] = REQUEST_EXCLUDED_HEADERS
    response_excluded_headers: frozenset[str] = RESPONSE_EXCLUDED_HEADERS

    def __post_init__(self) -> None:
        object.__setattr__(self, "backend_origin", _validate_origin(self.backend_origin, "backend origin"))
        if self.public_base_url:
            object.__setattr__(
                self, "public_base_url", _validate_origin(self.public_base_url, "public base URL")
            )


def _validate_origin(value: str, label: str) -> str:
    parts = urlsplit(value.strip())
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ConfigurationError(f"Invalid {label} '{value}': expected http(s)://host[:port]")
    if parts.path not in {"", "/"} or parts.query or parts.fragment:
        raise ConfigurationError(f"Invalid {label} '{value}': must not carry a path or query")
    return f"{parts.scheme}://{parts.netloc}"


def _get(cfg: dict, *keys: str):
    cur = cfg
    for key in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def _to_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid integer setting: %r", value)
        return None


def _to_str(value) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _to_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid numeric setting: %r", value)
        return None


def _to_bool(value) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    value_str = str(value).strip().lower()
    if value_str in {"1", "true", "yes", "on"}:
        return True
    if value_str in {"0", "false", "no", "off"}:
        return False
    logger.warning("Ignoring invalid boolean setting: %r", value)
    return None


def settings_from_config(cfg: dict) -> ProxySettings:
    """Build settings from a parsed config dict plus environment overrides."""
    root = _get(cfg, "proxy_settings") or {}
    defaults = ProxySettings()

    listen_host = _to_str(_get(root, "server", "host")) or defaults.listen_host
    listen_port = _to_int(_get(root, "server", "port")) or defaults.listen_port
    backend_origin = _to_str(_get(root, "backend", "origin")) or defaults.backend_origin
    timeout_seconds = _to_float(_get(root, "backend", "timeout_seconds"))
    public_base_url = _to_str(_get(root, "public_base_url"))
    index_message = _to_str(_get(root, "index_message")) or defaults.index_message
    verify_path = _to_str(_get(root, "verify", "path")) or defaults.verify_path
    verify_timeout = _to_float(_get(root, "verify", "timeout_seconds")) or defaults.verify_timeout_seconds
    debug = _to_bool(_get(root, "logging", "debug")) or False
    log_file = _to_str(_get(root, "logging", "log_file"))

    # Env overrides
    listen_host = os.getenv("GEMINI_BALANCE_HOST", listen_host)
    listen_port = _to_int(os.getenv("GEMINI_BALANCE_PORT")) or listen_port
    backend_origin = os.getenv("GEMINI_BALANCE_BACKEND_ORIGIN", backend_origin)
    public_base_url = os.getenv("GEMINI_BALANCE_PUBLIC_BASE_URL", public_base_url)

    timeout_env = os.getenv("GEMINI_BALANCE_TIMEOUT")
    if timeout_env is not None:
        timeout_seconds = _to_float(timeout_env) if timeout_env.strip() else None

    debug_env = _to_bool(os.getenv("GEMINI_BALANCE_DEBUG"))
    if debug_env is not None:
        debug = debug_env

    return ProxySettings(
        listen_host=listen_host,
        listen_port=listen_port,
        backend_origin=backend_origin,
        timeout_seconds=timeout_seconds if timeout_seconds and timeout_seconds > 0 else None,
        public_base_url=public_base_url or None,
        index_message=index_message,
        verify_path=verify_path if verify_path.startswith("/") else f"/{verify_path}",
        verify_timeout_seconds=verify_timeout,
        debug=debug,
        log_file=log_file,
    )


def load_settings(path: str | None = None) -> ProxySettings:
    """Load settings from the YAML config; fall back to defaults if it can't be read."""
    cfg: dict = {}
    try:
        cfg = load_config(path)
    except Exception as exc:
        logger.warning("Failed to load config; using defaults. (%s)", exc)
    return settings_from_config(cfg)

"""API module for the proxy."""

from .routes import (
    cors_preflight,
    dialect_unavailable,
    index_page,
    is_dialect_path,
    verify_credentials,
)

__all__ = [
    "cors_preflight",
    "dialect_unavailable",
    "index_page",
    "is_dialect_path",
    "verify_credentials",
]

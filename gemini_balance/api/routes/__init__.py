"""API routes for the proxy."""

from .dialect import DIALECT_PATH_SUFFIXES, DialectHandler, dialect_unavailable, is_dialect_path
from .index import INDEX_PATHS, index_page
from .preflight import cors_preflight
from .verify import verify_credentials

__all__ = [
    "DIALECT_PATH_SUFFIXES",
    "DialectHandler",
    "INDEX_PATHS",
    "cors_preflight",
    "dialect_unavailable",
    "index_page",
    "is_dialect_path",
    "verify_credentials",
]

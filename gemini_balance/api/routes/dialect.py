"""Hand-off point for OpenAI-style endpoints.

Requests whose path ends in one of ``DIALECT_PATH_SUFFIXES`` speak a different
API dialect and are passed to ``app.state.dialect_handler`` instead of the
Gemini pipeline. A translation layer can be plugged in through
``create_app(dialect_handler=...)``.
"""

import logging
from typing import Awaitable, Callable

from fastapi import Request
from fastapi.responses import JSONResponse, Response

logger = logging.getLogger("gemini-balance.dialect")

DialectHandler = Callable[[Request], Awaitable[Response]]

DIALECT_PATH_SUFFIXES = ("/chat/completions", "/completions", "/embeddings", "/models")


def is_dialect_path(path: str) -> bool:
    return path.endswith(DIALECT_PATH_SUFFIXES)


async def dialect_unavailable(request: Request) -> Response:
    logger.warning("No dialect handler configured for %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=501,
        content={
            "error": {
                "message": f"OpenAI-compatible endpoint {request.url.path} is not available on this proxy",
                "type": "not_implemented",
                "code": "dialect_unavailable",
            }
        },
    )

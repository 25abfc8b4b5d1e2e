"""CORS preflight short-circuit."""

from fastapi.responses import Response

from ...core.rewriter import CORS_PREFLIGHT_HEADERS


async def cors_preflight() -> Response:
    """Answer any OPTIONS request without contacting the backend."""
    return Response(status_code=204, headers=dict(CORS_PREFLIGHT_HEADERS))

"""Static info page."""

from fastapi import Request
from fastapi.responses import Response

INDEX_PATHS = frozenset({"/", "/index.html"})


async def index_page(request: Request) -> Response:
    """GET / and /index.html

    Returns:
        The configured info text as text/html.
    """
    settings = request.app.state.settings
    return Response(
        content=settings.index_message,
        status_code=200,
        headers={"Content-Type": "text/html"},
    )

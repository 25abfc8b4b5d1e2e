"""Main FastAPI application for the Gemini balancing proxy."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import Response

from .api.routes import (
    INDEX_PATHS,
    DialectHandler,
    cors_preflight,
    dialect_unavailable,
    index_page,
    is_dialect_path,
    verify_credentials,
)
from .core import CredentialPicker, ProxyPipeline
from .logging import setup_logging
from .settings import ProxySettings, load_settings

logger = logging.getLogger("gemini-balance")

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def build_client(settings: ProxySettings) -> httpx.AsyncClient:
    """Shared outbound client; no timeout unless one is configured."""
    if settings.timeout_seconds is None:
        timeout = httpx.Timeout(None)
    else:
        timeout = httpx.Timeout(settings.timeout_seconds)
    return httpx.AsyncClient(timeout=timeout, follow_redirects=False)


async def handle_request(request: Request) -> Response:
    """Dispatch a request: info page, verify, preflight, dialect hand-off, or backend."""
    path = request.url.path
    method = request.method

    if path in INDEX_PATHS:
        return await index_page(request)
    if path == "/verify" and method == "POST":
        return await verify_credentials(request)
    if method == "OPTIONS":
        return await cors_preflight()
    if is_dialect_path(path):
        return await request.app.state.dialect_handler(request)

    pipeline: ProxyPipeline = request.app.state.pipeline
    return await pipeline.handle(request, request.app.state.client)


def create_app(
    settings: Optional[ProxySettings] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    picker: Optional[CredentialPicker] = None,
    dialect_handler: Optional[DialectHandler] = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        settings: Proxy settings; loaded from the YAML config when omitted.
        client: Outbound HTTP client. When omitted, one is created on startup
            and closed on shutdown.
        picker: Credential picker; uniform random by default.
        dialect_handler: Handler for OpenAI-style paths.

    Returns:
        The configured FastAPI application instance.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_client = app.state.client is None
        if owns_client:
            app.state.client = build_client(settings)
        logger.info(
            "Gemini balance proxy ready on %s:%s -> %s",
            settings.listen_host,
            settings.listen_port,
            settings.backend_origin,
        )
        try:
            yield
        finally:
            if owns_client:
                await app.state.client.aclose()
                app.state.client = None

    app = FastAPI(title="Gemini Balance Proxy", lifespan=lifespan)
    app.state.settings = settings
    app.state.client = client
    app.state.pipeline = ProxyPipeline(settings, picker=picker)
    app.state.dialect_handler = dialect_handler or dialect_unavailable
    app.api_route("/{path:path}", methods=PROXY_METHODS)(handle_request)
    return app


settings = load_settings()
setup_logging(debug=settings.debug, log_file=settings.log_file)
app = create_app(settings)

__all__ = ["app", "create_app", "build_client", "handle_request", "settings"]

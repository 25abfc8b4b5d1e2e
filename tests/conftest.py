"""Pytest configuration and fixtures for testing."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Iterable, Optional

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gemini_balance.main import create_app
from gemini_balance.settings import ProxySettings

BACKEND = "https://generativelanguage.googleapis.com"


class FixedPicker:
    """Deterministic picker that always returns the same index and records calls."""

    def __init__(self, index: int = 0) -> None:
        self.index = index
        self.counts: list[int] = []

    def pick(self, count: int) -> int:
        self.counts.append(count)
        return self.index


def make_request(
    path: str = "/v1beta/models",
    *,
    method: str = "GET",
    query: str = "",
    headers: Optional[Iterable[tuple[str, str | bytes]]] = None,
    scheme: str = "https",
    host: str = "my-proxy.example",
) -> Request:
    """Build a bare Starlette request without going through a server."""
    raw_headers = [(b"host", host.encode("latin-1"))]
    for key, value in headers or []:
        if isinstance(value, str):
            value = value.encode("latin-1")
        raw_headers.append((key.lower().encode("latin-1"), value))
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": scheme,
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": query.encode("latin-1"),
        "headers": raw_headers,
        "server": (host, 443 if scheme == "https" else 80),
        "client": ("127.0.0.1", 50000),
    }
    return Request(scope)


def build_echo_backend() -> tuple[FastAPI, list[dict[str, Any]]]:
    """Backend stand-in that echoes what it received as JSON."""
    upstream = FastAPI()
    received: list[dict[str, Any]] = []

    @upstream.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"])
    async def echo(path: str, request: Request) -> JSONResponse:
        body = await request.body()
        entry = {
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query,
            "headers": dict(request.headers),
            "body": body.decode("utf-8"),
        }
        received.append(entry)
        return JSONResponse(entry)

    return upstream, received


def build_proxy_app(
    upstream: FastAPI | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    settings: ProxySettings | None = None,
    picker: Any = None,
    **kwargs: Any,
) -> FastAPI:
    if transport is None:
        transport = httpx.ASGITransport(app=upstream)
    client = httpx.AsyncClient(transport=transport)
    return create_app(settings or ProxySettings(), client=client, picker=picker, **kwargs)


@asynccontextmanager
async def proxy_client(app: FastAPI, base_url: str = "https://my-proxy.example"):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url=base_url,
    ) as client:
        yield client
    await app.state.client.aclose()


@pytest.fixture
def settings() -> ProxySettings:
    return ProxySettings()


@pytest.fixture
def picker() -> FixedPicker:
    return FixedPicker()


@pytest.fixture
def echo_backend() -> tuple[FastAPI, list[dict[str, Any]]]:
    return build_echo_backend()

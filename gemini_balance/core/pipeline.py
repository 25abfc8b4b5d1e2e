"""Request/response pipeline between the client and the backend.

A request goes through ``build_outbound`` -> ``call`` -> ``build_response``.
The call step never raises: its outcome is a ``CallResult`` carrying either the
streamed backend response or the error, and ``build_response`` maps errors to
a plain-text 500.
"""

from __future__ import annotations

import logging
import time
import traceback
from dataclasses import dataclass
from typing import TYPE_CHECKING, AsyncIterator, Optional

import httpx
from fastapi import Request
from fastapi.responses import Response, StreamingResponse

from ..logging.setup import mask_secret
from .credentials import CredentialPicker, CredentialSelector
from .exceptions import UpstreamCallError
from .headers import HeaderAction, HeaderClassifier, build_request_classifier
from .rewriter import ResponseRewriter
from .target import resolve_target_url

if TYPE_CHECKING:
    from ..settings import ProxySettings

logger = logging.getLogger("gemini-balance.pipeline")

FAILURE_MESSAGE = "Internal Server Error"


@dataclass(frozen=True)
class OutboundRequest:
    method: str
    url: str
    headers: dict[bytes, bytes]
    body: Optional[AsyncIterator[bytes]] = None


@dataclass(frozen=True)
class CallResult:
    response: Optional[httpx.Response] = None
    error: Optional[UpstreamCallError] = None
    stack_trace: str = ""

    @property
    def ok(self) -> bool:
        return self.response is not None

    @classmethod
    def failed(cls, exc: BaseException, target_url: Optional[str] = None) -> "CallResult":
        return cls(
            error=UpstreamCallError.from_exception(exc, target_url),
            stack_trace="".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ),
        )


def _safe_headers_for_log(headers: dict[bytes, bytes], secret_names: set[str]) -> dict[str, str]:
    safe: dict[str, str] = {}
    for key, value in headers.items():
        name = key.decode("latin-1")
        text = value.decode("latin-1")
        safe[name] = mask_secret(text) if name in secret_names else text
    return safe


def public_origin_for(request: Request, settings: ProxySettings) -> str:
    """The proxy's own scheme://host as seen by the caller."""
    if settings.public_base_url:
        return settings.public_base_url
    return f"{request.url.scheme}://{request.url.netloc}"


def failure_response(stack_trace: str) -> Response:
    return Response(
        content=f"{FAILURE_MESSAGE}\n{stack_trace}",
        status_code=500,
        headers={"Content-Type": "text/plain"},
    )


class ProxyPipeline:
    """Forwards one inbound request to the backend and relays the answer."""

    def __init__(
        self,
        settings: ProxySettings,
        *,
        picker: Optional[CredentialPicker] = None,
        request_classifier: Optional[HeaderClassifier] = None,
        rewriter: Optional[ResponseRewriter] = None,
    ) -> None:
        self.settings = settings
        self.selector = CredentialSelector(picker)
        self.request_classifier = request_classifier or build_request_classifier(settings)
        self.rewriter = rewriter or ResponseRewriter(settings)

    def build_outbound_headers(self, request: Request) -> dict[bytes, bytes]:
        """Classify the raw inbound header pairs; forwarded values keep their bytes."""
        credential_key = self.settings.credential_header.encode("latin-1")
        headers: dict[bytes, bytes] = {}
        for key, value in request.headers.raw:
            action = self.request_classifier.classify(key.decode("latin-1"))
            if action is HeaderAction.DROP:
                continue
            if action is HeaderAction.TRANSFORM:
                selected = self.selector.select(value.decode("latin-1"))
                if selected is None:
                    headers.pop(credential_key, None)
                else:
                    headers[credential_key] = selected.encode("latin-1")
                continue
            headers[key.lower()] = value
        return headers

    def build_outbound(self, request: Request) -> OutboundRequest:
        raw_path = request.scope.get("raw_path")
        path = raw_path.split(b"?", 1)[0].decode("latin-1") if raw_path else request.url.path
        query = request.scope.get("query_string", b"").decode("latin-1")
        url = resolve_target_url(self.settings.backend_origin, path, query)

        has_body = "content-length" in request.headers or "transfer-encoding" in request.headers
        return OutboundRequest(
            method=request.method,
            url=url,
            headers=self.build_outbound_headers(request),
            body=request.stream() if has_body else None,
        )

    async def call(self, client: httpx.AsyncClient, outbound: OutboundRequest) -> CallResult:
        logger.info("Forwarding %s %s", outbound.method, outbound.url)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Outbound headers: %s",
                _safe_headers_for_log(
                    outbound.headers, {self.settings.credential_header, "authorization"}
                ),
            )
        start_time = time.perf_counter()
        try:
            upstream_request = client.build_request(
                outbound.method,
                outbound.url,
                headers=outbound.headers,
                content=outbound.body,
            )
            upstream_response = await client.send(upstream_request, stream=True)
        except Exception as exc:
            elapsed = time.perf_counter() - start_time
            logger.error(
                "Upstream call failed after %.3fs: %s (type=%s, target=%s)",
                elapsed,
                exc,
                type(exc).__name__,
                outbound.url,
            )
            return CallResult.failed(exc, outbound.url)

        logger.info(
            "Upstream responded %s in %.3fs",
            upstream_response.status_code,
            time.perf_counter() - start_time,
        )
        return CallResult(response=upstream_response)

    async def build_response(self, result: CallResult, request: Request) -> Response:
        if not result.ok:
            return failure_response(result.stack_trace)

        upstream_response = result.response
        try:
            headers = self.rewriter.rewrite(
                upstream_response.headers.raw,
                public_origin_for(request, self.settings),
                cors=bool(request.headers.get("origin")),
            )
            # Streamed bytes are decoded, so an encoded length no longer applies.
            if "content-encoding" in upstream_response.headers and "content-length" in headers:
                del headers["content-length"]
        except Exception as exc:
            logger.exception("Failed to build response headers")
            await upstream_response.aclose()
            return failure_response(CallResult.failed(exc).stack_trace)

        async def _iter_response():
            chunk_count = 0
            total_bytes = 0
            try:
                async for chunk in upstream_response.aiter_bytes():
                    chunk_count += 1
                    total_bytes += len(chunk)
                    yield chunk
            finally:
                await upstream_response.aclose()
                logger.debug(
                    "Streaming response complete: %d chunks, %d bytes",
                    chunk_count,
                    total_bytes,
                )

        return StreamingResponse(
            _iter_response(),
            status_code=upstream_response.status_code,
            headers=headers,
        )

    async def handle(self, request: Request, client: httpx.AsyncClient) -> Response:
        try:
            outbound = self.build_outbound(request)
        except Exception as exc:
            logger.exception("Failed to build outbound request")
            return failure_response(CallResult.failed(exc).stack_trace)
        result = await self.call(client, outbound)
        return await self.build_response(result, request)

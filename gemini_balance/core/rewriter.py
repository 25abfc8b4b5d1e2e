"""Backend -> client response header rewriting."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional
from urllib.parse import urlsplit, urlunsplit

from starlette.datastructures import MutableHeaders

from .headers import HeaderAction, HeaderClassifier, build_response_classifier

if TYPE_CHECKING:
    from ..settings import ProxySettings

logger = logging.getLogger("gemini-balance.rewriter")

CORS_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"

CORS_RESPONSE_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Expose-Headers": "*",
}

CORS_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Max-Age": "86400",
}


def rewrite_origin(url: str, public_origin: str) -> str:
    """Move ``url`` onto ``public_origin``, keeping its path and query.

    Raises ValueError when ``url`` is not an absolute URL.
    """
    source = urlsplit(url)
    if not source.scheme or not source.netloc:
        raise ValueError(f"not an absolute URL: {url!r}")
    target = urlsplit(public_origin)
    return urlunsplit((target.scheme, target.netloc, source.path, source.query, ""))


class ResponseRewriter:
    def __init__(
        self,
        settings: ProxySettings,
        classifier: Optional[HeaderClassifier] = None,
    ) -> None:
        self.settings = settings
        self.classifier = classifier or build_response_classifier(settings)

    def rewrite(
        self,
        backend_headers: Iterable[tuple[bytes, bytes]],
        public_origin: str,
        *,
        cors: bool = False,
    ) -> MutableHeaders:
        """Build client-facing headers from the backend's raw header pairs.

        Values are relayed as the backend sent them; only the upload URL is
        decoded and re-encoded.
        """
        raw: list[tuple[bytes, bytes]] = []
        for key, value in backend_headers:
            name = key.decode("latin-1")
            action = self.classifier.classify(name)
            if action is HeaderAction.DROP:
                continue
            if action is HeaderAction.TRANSFORM:
                rewritten = self._rewrite_upload_url(value.decode("latin-1"), public_origin)
                value = rewritten.encode("latin-1")
            else:
                logger.debug("  %s: %r", name, value)
            raw.append((key.lower(), value))

        headers = MutableHeaders(raw=raw)
        headers["Referrer-Policy"] = "no-referrer"
        if cors:
            for key, value in CORS_RESPONSE_HEADERS.items():
                headers[key] = value
        return headers

    def _rewrite_upload_url(self, value: str, public_origin: str) -> str:
        try:
            rewritten = rewrite_origin(value, public_origin)
        except ValueError as exc:
            logger.warning("Failed to rewrite upload URL %r: %s", value, exc)
            return value
        logger.info("Rewrote %s: %s -> %s", self.settings.upload_url_header, value, rewritten)
        return rewritten

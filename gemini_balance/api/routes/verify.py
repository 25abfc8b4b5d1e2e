"""Credential verification endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from fastapi import Request
from fastapi.responses import JSONResponse

from ...core.credentials import parse_credentials
from ...core.exceptions import UpstreamCallError
from ...core.target import resolve_target_url
from ...logging.setup import mask_secret

logger = logging.getLogger("gemini-balance.verify")


async def _check_credential(
    client: httpx.AsyncClient,
    url: str,
    header_name: str,
    credential: str,
    timeout: float,
) -> dict[str, Any]:
    result: dict[str, Any] = {
        "key": mask_secret(credential),
        "status": "BAD",
        "http_status": None,
        "error": None,
    }
    try:
        response = await client.get(url, headers={header_name: credential}, timeout=timeout)
    except httpx.HTTPError as exc:
        result["error"] = UpstreamCallError.from_exception(exc, url).message
        logger.warning("Verification of %s failed: %s", result["key"], result["error"])
        return result

    result["http_status"] = response.status_code
    if response.is_success:
        result["status"] = "GOOD"
    else:
        result["error"] = response.text[:500]
    logger.info("Verified %s -> %s (%s)", result["key"], result["status"], response.status_code)
    return result


async def verify_credentials(request: Request) -> JSONResponse:
    """Check every credential in the credential header against the backend.

    POST /verify

    Returns:
        One result per credential, in the order they were supplied.
    """
    settings = request.app.state.settings
    client: httpx.AsyncClient = request.app.state.client
    credentials = parse_credentials(request.headers.get(settings.credential_header))
    if not credentials:
        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "message": f"No credentials supplied in {settings.credential_header}",
                    "code": "missing_credentials",
                }
            },
        )

    url = resolve_target_url(settings.backend_origin, settings.verify_path)
    logger.info("Verifying %d credential(s) against %s", len(credentials), url)
    results = await asyncio.gather(
        *(
            _check_credential(
                client,
                url,
                settings.credential_header,
                credential,
                settings.verify_timeout_seconds,
            )
            for credential in credentials
        )
    )
    return JSONResponse(content={"results": list(results)})

"""Outbound URL construction."""


def resolve_target_url(origin: str, path: str, query: str = "") -> str:
    """Join the backend origin with the raw inbound path and query string."""
    url = f"{origin}{path}"
    if query:
        url = f"{url}?{query}"
    return url

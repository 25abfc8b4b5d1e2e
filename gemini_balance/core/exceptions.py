"""Core exceptions for the proxy."""

from typing import Optional


class ProxyError(Exception):
    """Base exception for proxy errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(ProxyError):
    """Raised when there's an issue with the configuration."""
    pass


class UpstreamCallError(ProxyError):
    """Describes a failed call to the backend."""

    def __init__(
        self,
        message: str,
        target_url: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.target_url = target_url
        self.cause = cause

    @classmethod
    def from_exception(cls, exc: BaseException, target_url: Optional[str] = None) -> "UpstreamCallError":
        """Summarize a transport exception as ``Type: message``."""
        parts = [exc.__class__.__name__]
        message = str(exc).strip()
        if message:
            parts.append(message)
        return cls(": ".join(parts), target_url=target_url, cause=exc)

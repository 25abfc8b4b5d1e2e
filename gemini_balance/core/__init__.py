"""Core module initialization."""

from .credentials import CredentialPicker, CredentialSelector, RandomPicker, parse_credentials
from .exceptions import ConfigurationError, ProxyError, UpstreamCallError
from .headers import (
    HeaderAction,
    HeaderClassifier,
    HeaderRule,
    build_request_classifier,
    build_response_classifier,
)
from .pipeline import CallResult, OutboundRequest, ProxyPipeline, failure_response
from .rewriter import CORS_PREFLIGHT_HEADERS, CORS_RESPONSE_HEADERS, ResponseRewriter
from .target import resolve_target_url

__all__ = [
    "CORS_PREFLIGHT_HEADERS",
    "CORS_RESPONSE_HEADERS",
    "CallResult",
    "ConfigurationError",
    "CredentialPicker",
    "CredentialSelector",
    "HeaderAction",
    "HeaderClassifier",
    "HeaderRule",
    "OutboundRequest",
    "ProxyError",
    "ProxyPipeline",
    "RandomPicker",
    "ResponseRewriter",
    "UpstreamCallError",
    "build_request_classifier",
    "build_response_classifier",
    "failure_response",
    "parse_credentials",
    "resolve_target_url",
]

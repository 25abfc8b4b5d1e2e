"""Header classification rules for both directions of the proxy.

Each direction is a small decision table: an ordered list of ``HeaderRule``
entries evaluated top to bottom, first match wins. Names that no rule matches
are forwarded untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, Sequence

if TYPE_CHECKING:
    from ..settings import ProxySettings

logger = logging.getLogger("gemini-balance.headers")


class HeaderAction(str, Enum):
    DROP = "drop"
    FORWARD = "forward"
    TRANSFORM = "transform"


@dataclass(frozen=True)
class HeaderRule:
    """A single row of a classification table."""

    label: str
    matches: Callable[[str], bool]
    action: HeaderAction


def equals(name: str) -> Callable[[str], bool]:
    target = name.lower()
    return lambda key: key == target


def starts_with(prefix: str) -> Callable[[str], bool]:
    target = prefix.lower()
    return lambda key: key.startswith(target)


def one_of(names: Iterable[str]) -> Callable[[str], bool]:
    targets = frozenset(name.lower() for name in names)
    return lambda key: key in targets


def normalize_header_name(name: str) -> str:
    return name.strip().lower()


class HeaderClassifier:
    """Classifies header names against an ordered rule table."""

    def __init__(
        self,
        rules: Sequence[HeaderRule],
        *,
        direction: str,
        default: HeaderAction = HeaderAction.FORWARD,
    ) -> None:
        self.rules = tuple(rules)
        self.direction = direction
        self.default = default

    def classify(self, name: str) -> HeaderAction:
        key = normalize_header_name(name)
        for rule in self.rules:
            if rule.matches(key):
                action = rule.action
                break
        else:
            action = self.default
        logger.debug("%s header %s -> %s", self.direction, key, action.value)
        return action


def request_header_rules(settings: ProxySettings) -> list[HeaderRule]:
    return [
        HeaderRule("credential", equals(settings.credential_header), HeaderAction.TRANSFORM),
        HeaderRule("vendor", starts_with(settings.vendor_header_prefix), HeaderAction.FORWARD),
        HeaderRule("content", starts_with(settings.content_header_prefix), HeaderAction.FORWARD),
        HeaderRule("excluded", one_of(settings.request_excluded_headers), HeaderAction.DROP),
    ]


def response_header_rules(settings: ProxySettings) -> list[HeaderRule]:
    return [
        HeaderRule("excluded", one_of(settings.response_excluded_headers), HeaderAction.DROP),
        HeaderRule("upload-url", equals(settings.upload_url_header), HeaderAction.TRANSFORM),
    ]


def build_request_classifier(settings: ProxySettings) -> HeaderClassifier:
    return HeaderClassifier(request_header_rules(settings), direction="request")


def build_response_classifier(settings: ProxySettings) -> HeaderClassifier:
    return HeaderClassifier(response_header_rules(settings), direction="response")

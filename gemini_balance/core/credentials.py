"""Selection of one credential out of a comma-separated header value."""

from __future__ import annotations

import logging
import random
from typing import Optional, Protocol

from ..logging.setup import mask_secret

logger = logging.getLogger("gemini-balance.credentials")


class CredentialPicker(Protocol):
    def pick(self, count: int) -> int:
        """Return an index in ``range(count)``."""
        ...


class RandomPicker:
    """Draws a fresh uniform index on every call."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def pick(self, count: int) -> int:
        return self._rng.randrange(count)


def parse_credentials(raw: Optional[str]) -> list[str]:
    """Split a header value on commas, trimming and dropping empty entries."""
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


class CredentialSelector:
    def __init__(self, picker: Optional[CredentialPicker] = None) -> None:
        self.picker = picker or RandomPicker()

    def select(self, raw: Optional[str]) -> Optional[str]:
        """Pick one credential, or ``None`` when the value holds none."""
        candidates = parse_credentials(raw)
        if not candidates:
            return None
        index = self.picker.pick(len(candidates))
        if not 0 <= index < len(candidates):
            raise IndexError(f"Picker returned {index} for {len(candidates)} candidates")
        selected = candidates[index]
        logger.info(
            "Selected API key %s (%d/%d)",
            mask_secret(selected),
            index + 1,
            len(candidates),
        )
        return selected

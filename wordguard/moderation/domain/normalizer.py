"""Text canonicalisation shared by dictionary terms and scanned content."""

from __future__ import annotations

import re
from dataclasses import dataclass

# Everything that is not a word character or a common Han ideograph.
# Underscore counts as a separator even though ``\w`` matches it.
SEPARATOR_PATTERN = r"[^\w\u4e00-\u9fa5]|_"
_SEPARATOR_RE = re.compile(SEPARATOR_PATTERN)


@dataclass(frozen=True, slots=True)
class Normalizer:
    """Pure, idempotent text normaliser.

    ``case_sensitive=False`` lower-cases; ``fuzzy=True`` strips every
    separator so ``"s p-a_m"`` compares equal to ``"spam"``.
    """

    case_sensitive: bool = False
    fuzzy: bool = True

    def normalize(self, text: str | None) -> str:
        if not text:
            return ""
        normalized = text.strip()
        if not self.case_sensitive:
            normalized = normalized.lower()
        if self.fuzzy:
            normalized = _SEPARATOR_RE.sub("", normalized)
        return normalized

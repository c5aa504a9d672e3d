"""Tier bucketing, manual-review policy, and masking of matched terms."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Protocol, Sequence

from wordguard.moderation.domain.normalizer import SEPARATOR_PATTERN
from wordguard.moderation.domain.tiers import RiskTier

_SEPARATOR_RE = re.compile(SEPARATOR_PATTERN)
_FUZZY_GAP = rf"(?:{SEPARATOR_PATTERN})*"


class TierLookup(Protocol):
    def tier_of(self, term: str) -> RiskTier | None:
        ...


@dataclass(frozen=True, slots=True)
class ReviewPolicy:
    """When a flagged text must go to a human moderator.

    Any High-tier match, or ``medium_threshold`` distinct Medium-tier matches.
    """

    review_on_high: bool = True
    medium_threshold: int = 3

    def requires_review(self, *, high: int, medium: int) -> bool:
        if self.review_on_high and high > 0:
            return True
        return medium >= max(1, self.medium_threshold)


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of one filtering call."""

    contains_sensitive_words: bool
    total_detected_words: int = 0
    detected_words: tuple[str, ...] = ()
    high_risk_words: tuple[str, ...] = ()
    medium_risk_words: tuple[str, ...] = ()
    low_risk_words: tuple[str, ...] = ()
    filtered_content: str | None = None
    requires_manual_review: bool = False

    @staticmethod
    def clean(content: str | None) -> "MatchResult":
        return MatchResult(contains_sensitive_words=False, filtered_content=content)

    @staticmethod
    def fail_closed(content: str | None) -> "MatchResult":
        """Conservative result used when a scan could not complete."""
        return MatchResult(
            contains_sensitive_words=True,
            total_detected_words=0,
            filtered_content=content,
            requires_manual_review=True,
        )

    @property
    def highest_tier(self) -> RiskTier | None:
        if self.high_risk_words:
            return RiskTier.HIGH
        if self.medium_risk_words:
            return RiskTier.MEDIUM
        if self.low_risk_words:
            return RiskTier.LOW
        return None

    def as_dict(self) -> dict[str, Any]:
        highest = self.highest_tier
        return {
            "contains_sensitive_words": self.contains_sensitive_words,
            "total_detected_words": self.total_detected_words,
            "detected_words": list(self.detected_words),
            "high_risk_words": list(self.high_risk_words),
            "medium_risk_words": list(self.medium_risk_words),
            "low_risk_words": list(self.low_risk_words),
            "filtered_content": self.filtered_content,
            "requires_manual_review": self.requires_manual_review,
            "highest_tier": highest.value if highest else None,
        }


def mask_terms(
    content: str,
    terms: Iterable[str],
    mask_char: str = "*",
    *,
    fuzzy: bool = True,
    case_sensitive: bool = False,
) -> str:
    """Replace each term in ``content`` with a run of ``mask_char``.

    Every term is located in the unmodified ``content`` first, so masks
    written for one term never hide another term's occurrence. With
    ``fuzzy`` the term's characters may be interleaved with separators
    (``"s-p a_m"``, ``"b*a*d"``). Overlapping occurrences are merged and
    masked as one run.
    """
    mask_char = (mask_char or "*")[0]
    flags = 0 if case_sensitive else re.IGNORECASE
    spans: list[tuple[int, int]] = []
    for term in dict.fromkeys(terms):
        if not term:
            continue
        pattern = _term_pattern(term, fuzzy)
        spans.extend(match.span() for match in re.finditer(pattern, content, flags))
    if not spans:
        return content

    pieces: list[str] = []
    cursor = 0
    for start, end in _merge_spans(spans):
        region = content[start:end]
        # separators inside a fuzzy hit are masked away with it
        if fuzzy:
            region = _SEPARATOR_RE.sub("", region)
        pieces.append(content[cursor:start])
        pieces.append(mask_char * len(region))
        cursor = end
    pieces.append(content[cursor:])
    return "".join(pieces)


def _term_pattern(term: str, fuzzy: bool) -> str:
    if fuzzy and len(term) > 1:
        return _FUZZY_GAP.join(re.escape(char) for char in term)
    return re.escape(term)


def _merge_spans(spans: list[tuple[int, int]]) -> list[tuple[int, int]]:
    merged: list[tuple[int, int]] = []
    for start, end in sorted(spans):
        if merged and start < merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def classify_and_mask(
    original: str,
    matched: Sequence[str],
    store: TierLookup,
    mask_char: str = "*",
    do_mask: bool = False,
    *,
    fuzzy: bool = True,
    case_sensitive: bool = False,
    policy: ReviewPolicy | None = None,
) -> MatchResult:
    if not matched:
        return MatchResult.clean(original)
    policy = policy or ReviewPolicy()

    buckets: dict[RiskTier, list[str]] = {tier: [] for tier in RiskTier}
    for term in matched:
        tier = store.tier_of(term)
        # removed since the scan started: counted, but not bucketed
        if tier is None:
            continue
        buckets[tier].append(term)

    filtered = (
        mask_terms(original, matched, mask_char, fuzzy=fuzzy, case_sensitive=case_sensitive)
        if do_mask
        else original
    )
    high = buckets[RiskTier.HIGH]
    medium = buckets[RiskTier.MEDIUM]
    return MatchResult(
        contains_sensitive_words=True,
        total_detected_words=len(matched),
        detected_words=tuple(matched),
        high_risk_words=tuple(high),
        medium_risk_words=tuple(medium),
        low_risk_words=tuple(buckets[RiskTier.LOW]),
        filtered_content=filtered,
        requires_manual_review=policy.requires_review(high=len(high), medium=len(medium)),
    )

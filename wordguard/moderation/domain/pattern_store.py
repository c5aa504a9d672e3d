"""Authoritative term → risk tier mapping with a per-tier index."""

from __future__ import annotations

import threading
from types import MappingProxyType
from typing import Iterable, Mapping, NamedTuple

from wordguard.moderation.domain.tiers import RiskTier


class TermStatistics(NamedTuple):
    high: int
    medium: int
    low: int
    total: int


class PatternStore:
    """Normalized terms keyed to their tier.

    The primary mapping and the tier index are only ever changed together
    under ``self._lock``. ``tier_of`` reads without locking; a term removed
    concurrently simply reads as absent.
    """

    def __init__(self, entries: Mapping[str, RiskTier] | None = None) -> None:
        self._lock = threading.RLock()
        self._terms: dict[str, RiskTier] = {}
        self._by_tier: dict[RiskTier, set[str]] = {tier: set() for tier in RiskTier}
        if entries:
            self.replace_all(entries)

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, term: object) -> bool:
        return term in self._terms

    def tier_of(self, term: str) -> RiskTier | None:
        return self._terms.get(term)

    def upsert(self, term: str, tier: RiskTier) -> None:
        if not term:
            return
        with self._lock:
            self._upsert_locked(term, tier)

    def upsert_many(self, terms: Iterable[str], tier: RiskTier) -> int:
        count = 0
        with self._lock:
            for term in terms:
                if term:
                    self._upsert_locked(term, tier)
                    count += 1
        return count

    def remove(self, terms: Iterable[str]) -> int:
        """Drop ``terms``; unknown ones are ignored. Returns how many were removed."""
        removed = 0
        with self._lock:
            for term in terms:
                tier = self._terms.pop(term, None)
                if tier is None:
                    continue
                self._by_tier[tier].discard(term)
                removed += 1
        return removed

    def replace_all(self, entries: Mapping[str, RiskTier]) -> None:
        terms = {term: tier for term, tier in entries.items() if term}
        by_tier: dict[RiskTier, set[str]] = {tier: set() for tier in RiskTier}
        for term, tier in terms.items():
            by_tier[tier].add(term)
        with self._lock:
            self._terms = terms
            self._by_tier = by_tier

    def snapshot(self) -> Mapping[str, RiskTier]:
        with self._lock:
            return MappingProxyType(dict(self._terms))

    def terms_for(self, tier: RiskTier) -> frozenset[str]:
        with self._lock:
            return frozenset(self._by_tier[tier])

    def statistics(self) -> TermStatistics:
        with self._lock:
            return TermStatistics(
                high=len(self._by_tier[RiskTier.HIGH]),
                medium=len(self._by_tier[RiskTier.MEDIUM]),
                low=len(self._by_tier[RiskTier.LOW]),
                total=len(self._terms),
            )

    def _upsert_locked(self, term: str, tier: RiskTier) -> None:
        previous = self._terms.get(term)
        if previous is not None and previous is not tier:
            self._by_tier[previous].discard(term)
        self._terms[term] = tier
        self._by_tier[tier].add(term)

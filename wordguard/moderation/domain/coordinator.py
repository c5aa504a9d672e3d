"""Serialises dictionary mutations and publishes compiled automatons."""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Iterable, Mapping, Sequence

from wordguard.moderation.domain.automaton import EMPTY_AUTOMATON, Automaton, build_automaton
from wordguard.moderation.domain.normalizer import Normalizer
from wordguard.moderation.domain.pattern_store import PatternStore, TermStatistics
from wordguard.moderation.domain.term_sources import TermSource
from wordguard.moderation.domain.tiers import RiskTier, parse_tier
from wordguard.obs import metrics

logger = logging.getLogger(__name__)


class CoordinatorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    BUILDING = "building"


class MutationCoordinator:
    """Owns the pattern store and the currently published automaton.

    Mutations (add, remove, bulk load, reload) run one at a time under
    ``self._lock``; each ends by compiling a new automaton from a store
    snapshot and publishing it with a single reference assignment. Readers
    call :meth:`current` once per scan and never take the lock.
    """

    def __init__(
        self,
        normalizer: Normalizer | None = None,
        sources: Sequence[TermSource] = (),
        store: PatternStore | None = None,
    ) -> None:
        self.normalizer = normalizer or Normalizer()
        self.sources: tuple[TermSource, ...] = tuple(sources)
        self.store = store or PatternStore()
        self._lock = threading.RLock()
        self._automaton: Automaton = EMPTY_AUTOMATON
        self._state = CoordinatorState.UNINITIALIZED
        self._initialised = False

    @property
    def state(self) -> CoordinatorState:
        return self._state

    def current(self) -> Automaton:
        return self._automaton

    def ensure_ready(self) -> None:
        # blocks until the first build has been published
        if not self._initialised:
            self.initialize()

    def initialize(self) -> None:
        """Load every source into an empty dictionary. No-op once initialised."""
        with self._lock:
            if self._initialised:
                return
            self._rebuild_from_sources_locked("init")

    def reload(self) -> None:
        """Discard the dictionary and rebuild it from the configured sources."""
        with self._lock:
            self._rebuild_from_sources_locked("reload")

    def add_terms(self, terms: Iterable[str], tier: RiskTier | str) -> int:
        tier = parse_tier(tier)
        normalized = self._normalize_all(terms)
        with self._lock:
            self._initialize_locked()
            self._state = CoordinatorState.BUILDING
            count = self.store.upsert_many(normalized, tier)
            self._publish_locked("add")
        logger.info("added sensitive terms", extra={"count": count, "tier": tier.value})
        return count

    def remove_terms(self, terms: Iterable[str]) -> int:
        normalized = self._normalize_all(terms)
        with self._lock:
            self._initialize_locked()
            self._state = CoordinatorState.BUILDING
            removed = self.store.remove(normalized)
            self._publish_locked("remove")
        logger.info("removed sensitive terms", extra={"count": removed})
        return removed

    def load_terms(self, lists: Mapping[RiskTier, Iterable[str]]) -> int:
        """Upsert several tiers at once and publish a single new automaton."""
        with self._lock:
            self._initialize_locked()
            self._state = CoordinatorState.BUILDING
            count = 0
            for tier, words in lists.items():
                count += self.store.upsert_many(self._normalize_all(words), parse_tier(tier))
            self._publish_locked("load")
        logger.info("bulk loaded sensitive terms", extra={"count": count})
        return count

    def statistics(self) -> TermStatistics:
        return self.store.statistics()

    def _normalize_all(self, terms: Iterable[str]) -> list[str]:
        normalized: list[str] = []
        for term in terms:
            if not isinstance(term, str):
                continue
            value = self.normalizer.normalize(term)
            if value:
                normalized.append(value)
        return normalized

    def _initialize_locked(self) -> None:
        if not self._initialised:
            self._rebuild_from_sources_locked("init")

    def _rebuild_from_sources_locked(self, reason: str) -> None:
        self._state = CoordinatorState.BUILDING
        entries: dict[str, RiskTier] = {}
        for source in self.sources:
            try:
                lists = source.load()
            except Exception:
                logger.exception("term source %s failed to load; skipping", getattr(source, "name", source))
                continue
            for tier, words in lists.items():
                for term in self._normalize_all(words):
                    entries[term] = tier
        self.store.replace_all(entries)
        self._publish_locked(reason)
        self._initialised = True
        stats = self.store.statistics()
        logger.info(
            "sensitive terms %s",
            "initialised" if reason == "init" else "reloaded",
            extra={"total": stats.total, "high": stats.high, "medium": stats.medium, "low": stats.low},
        )

    def _publish_locked(self, reason: str) -> None:
        start = time.perf_counter()
        try:
            automaton = build_automaton(self.store.snapshot().keys())
            self._automaton = automaton
        finally:
            self._state = CoordinatorState.READY
        metrics.observe_build(reason, time.perf_counter() - start, automaton.node_count)
        stats = self.store.statistics()
        metrics.set_terms_loaded(stats.high, stats.medium, stats.low)

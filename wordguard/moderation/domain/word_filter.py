"""Sensitive-word filter entry points used by content-handling services."""

from __future__ import annotations

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Sequence

from wordguard.moderation.domain.classifier import MatchResult, ReviewPolicy, classify_and_mask
from wordguard.moderation.domain.coordinator import MutationCoordinator
from wordguard.moderation.domain.matcher import find_all
from wordguard.moderation.domain.normalizer import Normalizer
from wordguard.moderation.domain.pattern_store import TermStatistics
from wordguard.moderation.domain.term_sources import TermSource
from wordguard.moderation.domain.tiers import RiskTier
from wordguard.obs import metrics

if TYPE_CHECKING:  # pragma: no cover - type-only imports
    from wordguard.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterOptions:
    mask_char: str = "*"
    fuzzy: bool = True
    case_sensitive: bool = False
    policy: ReviewPolicy = field(default_factory=ReviewPolicy)
    batch_max_workers: int = 4

    @staticmethod
    def from_settings(config: "Settings") -> "FilterOptions":
        return FilterOptions(
            mask_char=config.mask_char,
            fuzzy=config.enable_fuzzy_matching,
            case_sensitive=config.case_sensitive,
            policy=ReviewPolicy(
                review_on_high=config.review_on_high,
                medium_threshold=config.medium_review_threshold,
            ),
            batch_max_workers=config.batch_max_workers,
        )


class SensitiveWordFilter:
    """Checks content against a live, mutable dictionary of forbidden terms.

    Usage::

        word_filter = SensitiveWordFilter(sources=[MappingTermSource({"high": ["badword"]})])
        result = word_filter.check("some comment", replace_with_mask=True)
        if result.requires_manual_review:
            enqueue_for_review(result)

    ``check`` never raises: an internal fault yields
    :meth:`MatchResult.fail_closed`.
    """

    def __init__(
        self,
        options: FilterOptions | None = None,
        sources: Sequence[TermSource] = (),
        coordinator: MutationCoordinator | None = None,
    ) -> None:
        self.options = options or FilterOptions()
        if coordinator is None:
            normalizer = Normalizer(case_sensitive=self.options.case_sensitive, fuzzy=self.options.fuzzy)
            coordinator = MutationCoordinator(normalizer=normalizer, sources=sources)
        self.coordinator = coordinator
        self.normalizer = coordinator.normalizer

    # --- Checking --------------------------------------------------------

    def check(self, content: str | None, replace_with_mask: bool = False) -> MatchResult:
        if content is None:
            return MatchResult.clean(content)
        start = time.perf_counter()
        try:
            if not content.strip():
                return MatchResult.clean(content)
            self.coordinator.ensure_ready()
            automaton = self.coordinator.current()
            matched = find_all(self.normalizer.normalize(content), automaton)
            result = classify_and_mask(
                content,
                matched,
                self.coordinator.store,
                self.options.mask_char,
                replace_with_mask,
                fuzzy=self.options.fuzzy,
                case_sensitive=self.options.case_sensitive,
                policy=self.options.policy,
            )
        except Exception as exc:
            metrics.CHECK_FAILURES_TOTAL.labels(exc.__class__.__name__).inc()
            metrics.observe_check("error", time.perf_counter() - start)
            logger.exception("sensitive word check failed; failing closed")
            return MatchResult.fail_closed(content)
        metrics.observe_check(_outcome(result), time.perf_counter() - start)
        _count_tiers(result)
        return result

    def check_batch(self, contents: Iterable[str | None], replace_with_mask: bool = False) -> list[MatchResult]:
        """Apply :meth:`check` to every item; results keep input order."""
        items = list(contents)
        if not items:
            return []
        workers = min(self.options.batch_max_workers, len(items))
        if workers <= 1:
            return [self.check(item, replace_with_mask) for item in items]
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="wordguard") as pool:
            return list(pool.map(lambda item: self.check(item, replace_with_mask), items))

    async def check_batch_async(
        self,
        contents: Iterable[str | None],
        replace_with_mask: bool = False,
    ) -> list[MatchResult]:
        items = list(contents)
        tasks = [asyncio.to_thread(self.check, item, replace_with_mask) for item in items]
        return list(await asyncio.gather(*tasks))

    # --- Administration --------------------------------------------------

    def add_terms(self, terms: Iterable[str], tier: RiskTier | str) -> int:
        return self.coordinator.add_terms(terms, tier)

    def remove_terms(self, terms: Iterable[str]) -> int:
        return self.coordinator.remove_terms(terms)

    def reload(self) -> None:
        self.coordinator.reload()

    def stats(self) -> TermStatistics:
        self.coordinator.ensure_ready()
        return self.coordinator.statistics()

    def automaton_size(self) -> int:
        return self.coordinator.current().node_count


def _outcome(result: MatchResult) -> str:
    if not result.contains_sensitive_words:
        return "clean"
    if result.requires_manual_review:
        return "review"
    return "flagged"


def _count_tiers(result: MatchResult) -> None:
    if not result.contains_sensitive_words:
        return
    bucketed = 0
    for tier, words in (
        (RiskTier.HIGH, result.high_risk_words),
        (RiskTier.MEDIUM, result.medium_risk_words),
        (RiskTier.LOW, result.low_risk_words),
    ):
        if words:
            metrics.MATCHED_TERMS_TOTAL.labels(tier.value).inc(len(words))
            bucketed += len(words)
    if result.total_detected_words > bucketed:
        metrics.MATCHED_TERMS_TOTAL.labels("unknown").inc(result.total_detected_words - bucketed)

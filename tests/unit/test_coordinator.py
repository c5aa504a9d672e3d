from __future__ import annotations

import logging
import threading

from wordguard.moderation.domain.coordinator import CoordinatorState, MutationCoordinator
from wordguard.moderation.domain.matcher import find_all
from wordguard.moderation.domain.normalizer import Normalizer
from wordguard.moderation.domain.pattern_store import TermStatistics
from wordguard.moderation.domain.term_sources import MappingTermSource
from wordguard.moderation.domain.tiers import RiskTier


class ExplodingSource:
    name = "exploding"

    def load(self):
        raise RuntimeError("backend unavailable")


def test_lifecycle_states() -> None:
    coordinator = MutationCoordinator(sources=[MappingTermSource({"low": ["spam"]})])
    assert coordinator.state is CoordinatorState.UNINITIALIZED
    assert coordinator.current().is_empty()

    coordinator.ensure_ready()

    assert coordinator.state is CoordinatorState.READY
    assert find_all("spam", coordinator.current()) == ["spam"]


def test_initialize_runs_once() -> None:
    mapping = {"low": ["spam"]}
    coordinator = MutationCoordinator(sources=[MappingTermSource(mapping)])
    coordinator.initialize()
    mapping["high"] = ["later"]
    coordinator.initialize()

    assert "later" not in coordinator.store


def test_later_sources_override_tiers() -> None:
    coordinator = MutationCoordinator(
        sources=[MappingTermSource({"low": ["Spam"]}), MappingTermSource({"high": ["spam"]})]
    )
    coordinator.initialize()

    assert coordinator.store.tier_of("spam") is RiskTier.HIGH
    assert coordinator.statistics() == TermStatistics(high=1, medium=0, low=0, total=1)


def test_failing_source_is_skipped(caplog) -> None:
    coordinator = MutationCoordinator(sources=[ExplodingSource(), MappingTermSource({"medium": ["scam"]})])
    with caplog.at_level(logging.ERROR):
        coordinator.initialize()

    assert coordinator.state is CoordinatorState.READY
    assert "scam" in coordinator.store
    assert any("exploding" in record.getMessage() for record in caplog.records)


def test_mutation_before_init_keeps_source_terms() -> None:
    coordinator = MutationCoordinator(sources=[MappingTermSource({"low": ["base"]})])
    coordinator.add_terms(["extra"], "High")

    assert coordinator.store.tier_of("base") is RiskTier.LOW
    assert coordinator.store.tier_of("extra") is RiskTier.HIGH


def test_terms_are_normalized_on_the_way_in() -> None:
    coordinator = MutationCoordinator(normalizer=Normalizer(fuzzy=True))
    added = coordinator.add_terms(["Bad Word", "  ", "", 42], RiskTier.MEDIUM)  # type: ignore[list-item]

    assert added == 1
    assert "badword" in coordinator.store
    assert coordinator.remove_terms(["BAD-word"]) == 1
    assert len(coordinator.store) == 0


def test_publish_swaps_whole_automaton() -> None:
    coordinator = MutationCoordinator()
    coordinator.add_terms(["alpha"], RiskTier.LOW)
    old = coordinator.current()

    coordinator.add_terms(["beta"], RiskTier.LOW)
    new = coordinator.current()

    assert new is not old
    assert find_all("alphabeta", old) == ["alpha"]
    assert find_all("alphabeta", new) == ["alpha", "beta"]


def test_reload_rebuilds_from_sources() -> None:
    mapping = {"low": ["spam"]}
    coordinator = MutationCoordinator(sources=[MappingTermSource(mapping)])
    coordinator.add_terms(["transient"], RiskTier.HIGH)
    mapping["medium"] = ["scam"]

    coordinator.reload()

    assert coordinator.state is CoordinatorState.READY
    assert "transient" not in coordinator.store
    assert find_all("spamscamtransient", coordinator.current()) == ["spam", "scam"]


def test_load_terms_publishes_once() -> None:
    coordinator = MutationCoordinator()
    coordinator.initialize()
    before = coordinator.current()

    count = coordinator.load_terms({RiskTier.HIGH: ["a1"], RiskTier.LOW: ["b1", "c1"]})

    assert count == 3
    assert coordinator.current() is not before
    assert coordinator.statistics() == TermStatistics(high=1, medium=0, low=2, total=3)


def test_readers_never_block_or_miss_stable_terms() -> None:
    coordinator = MutationCoordinator(sources=[MappingTermSource({"high": ["stable"]})])
    coordinator.initialize()
    failures: list[str] = []
    stop = threading.Event()

    def reader() -> None:
        while not stop.is_set():
            if "stable" not in find_all("xxstablexx", coordinator.current()):
                failures.append("missed")

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    try:
        for idx in range(50):
            coordinator.add_terms([f"word{idx}"], RiskTier.LOW)
            coordinator.remove_terms([f"word{idx - 1}"])
    finally:
        stop.set()
        for thread in threads:
            thread.join()

    assert failures == []
    assert coordinator.statistics().total == 2


def test_concurrent_first_callers_wait_for_initial_build() -> None:
    release = threading.Event()
    loads: list[int] = []

    class SlowSource:
        name = "slow"

        def load(self):
            loads.append(1)
            release.wait(timeout=5)
            return {RiskTier.HIGH: ["stable"]}

    coordinator = MutationCoordinator(sources=[SlowSource()])
    seen: list[list[str]] = []

    def reader() -> None:
        coordinator.ensure_ready()
        seen.append(find_all("stable", coordinator.current()))

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    release.set()
    for thread in threads:
        thread.join()

    assert loads == [1]
    assert seen == [["stable"]] * 4

from __future__ import annotations

import fakeredis
import pytest

from wordguard.moderation.domain.term_sources import MappingTermSource
from wordguard.moderation.domain.tiers import RiskTier
from wordguard.moderation.domain.word_filter import SensitiveWordFilter
from wordguard.moderation.infra.redis_terms import RedisTermSource


@pytest.fixture
def client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def source(client) -> RedisTermSource:
    return RedisTermSource(client, prefix="test:terms:")


def test_store_and_load(source, client) -> None:
    assert source.store(["badword", " evil ", ""], "High") == 2
    source.store(["spam"], RiskTier.LOW)

    assert client.smembers("test:terms:high") == {"badword", "evil"}
    assert source.load() == {
        RiskTier.HIGH: ["badword", "evil"],
        RiskTier.MEDIUM: [],
        RiskTier.LOW: ["spam"],
    }


def test_store_moves_term_between_tiers(source) -> None:
    source.store(["spam"], "low")
    source.store(["spam"], "medium")

    lists = source.load()
    assert lists[RiskTier.MEDIUM] == ["spam"]
    assert lists[RiskTier.LOW] == []


def test_discard_removes_from_every_tier(source) -> None:
    source.store(["spam"], "low")
    source.store(["badword"], "high")

    assert source.discard(["spam", "badword", "missing"]) == 2
    assert source.discard([]) == 0
    assert all(not words for words in source.load().values())


def test_reload_picks_up_persisted_terms(source) -> None:
    word_filter = SensitiveWordFilter(sources=[MappingTermSource({"low": ["spam"]}), source])
    assert word_filter.check("scam").contains_sensitive_words is False

    source.store(["scam"], "medium")
    source.store(["spam"], "high")
    word_filter.reload()

    assert word_filter.check("scam").medium_risk_words == ("scam",)
    assert word_filter.check("spam").high_risk_words == ("spam",)


def test_from_url_decodes_responses() -> None:
    source = RedisTermSource.from_url("redis://localhost:6379/0", prefix="x:")

    assert source.prefix == "x:"
    assert source.client.connection_pool.connection_kwargs["decode_responses"] is True

"""Redis-backed persistent term source.

One Redis set per tier (``<prefix>high``, ``<prefix>medium``, ``<prefix>low``)
holds the raw terms. Administrators persist edits here so they survive a
``reload()``; the filter only ever reads the sets while (re)initialising.
"""

from __future__ import annotations

import logging
from typing import Iterable

import redis

from wordguard.moderation.domain.term_sources import TermLists
from wordguard.moderation.domain.tiers import RiskTier, parse_tier

logger = logging.getLogger(__name__)


class RedisTermSource:
    name = "redis"

    def __init__(self, client: redis.Redis, *, prefix: str = "wordguard:terms:") -> None:
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, prefix: str = "wordguard:terms:") -> "RedisTermSource":
        return cls(redis.Redis.from_url(url, decode_responses=True), prefix=prefix)

    def key(self, tier: RiskTier) -> str:
        return f"{self.prefix}{tier.value}"

    def load(self) -> TermLists:
        pipe = self.client.pipeline(transaction=False)
        for tier in RiskTier:
            pipe.smembers(self.key(tier))
        members = pipe.execute()
        lists: TermLists = {}
        for tier, values in zip(RiskTier, members):
            lists[tier] = sorted(_decode(value) for value in values or ())
        return lists

    def store(self, terms: Iterable[str], tier: RiskTier | str) -> int:
        """Persist ``terms`` under ``tier``, removing them from the other tiers."""
        tier = parse_tier(tier)
        values = [term.strip() for term in terms if isinstance(term, str) and term.strip()]
        if not values:
            return 0
        pipe = self.client.pipeline(transaction=True)
        for other in RiskTier:
            if other is not tier:
                pipe.srem(self.key(other), *values)
        pipe.sadd(self.key(tier), *values)
        results = pipe.execute()
        return int(results[-1])

    def discard(self, terms: Iterable[str]) -> int:
        values = [term.strip() for term in terms if isinstance(term, str) and term.strip()]
        if not values:
            return 0
        pipe = self.client.pipeline(transaction=True)
        for tier in RiskTier:
            pipe.srem(self.key(tier), *values)
        removed = sum(int(count) for count in pipe.execute())
        logger.info("discarded persisted terms", extra={"count": removed})
        return removed


def _decode(value: bytes | str) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)

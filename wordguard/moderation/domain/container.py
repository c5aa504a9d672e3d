"""Lightweight container holding the process-wide filter instance."""

from __future__ import annotations

import threading
from pathlib import Path

from wordguard.moderation.domain.term_sources import (
    BuiltinTermSource,
    FileTermSource,
    MappingTermSource,
    TermSource,
)
from wordguard.moderation.domain.word_filter import FilterOptions, SensitiveWordFilter
from wordguard.moderation.infra.redis_terms import RedisTermSource
from wordguard.settings import Settings, settings

_lock = threading.Lock()
_word_filter: SensitiveWordFilter | None = None


def build_sources(config: Settings) -> list[TermSource]:
    sources: list[TermSource] = []
    if config.load_builtin_terms:
        sources.append(BuiltinTermSource())
    if config.terms:
        sources.append(MappingTermSource(dict(config.terms)))
    if config.terms_file:
        sources.append(FileTermSource(Path(config.terms_file)))
    if config.terms_redis_url:
        sources.append(RedisTermSource.from_url(config.terms_redis_url, prefix=config.terms_redis_prefix))
    return sources


def build_word_filter(config: Settings | None = None) -> SensitiveWordFilter:
    config = config or settings
    return SensitiveWordFilter(options=FilterOptions.from_settings(config), sources=build_sources(config))


def get_word_filter() -> SensitiveWordFilter:
    global _word_filter
    if _word_filter is None:
        with _lock:
            if _word_filter is None:
                _word_filter = build_word_filter()
    return _word_filter


def set_word_filter(word_filter: SensitiveWordFilter | None) -> None:
    global _word_filter
    with _lock:
        _word_filter = word_filter


__all__ = [
    "build_sources",
    "build_word_filter",
    "get_word_filter",
    "set_word_filter",
]

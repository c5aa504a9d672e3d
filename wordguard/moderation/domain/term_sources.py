"""Bulk term sources consulted when the dictionary is (re)initialised."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Protocol

import yaml

from wordguard.moderation.domain.tiers import RiskTier, parse_tier

logger = logging.getLogger(__name__)

TermLists = dict[RiskTier, list[str]]

BUILTIN_TERMS: Mapping[RiskTier, tuple[str, ...]] = {
    RiskTier.HIGH: (
        "恐怖主义",
        "暴恐",
        "极端主义",
        "邪教",
        "terrorism",
        "child abuse",
    ),
    RiskTier.MEDIUM: (
        "毒品",
        "枪支",
        "爆炸",
        "自杀",
        "色情",
        "赌博",
        "诈骗",
        "洗钱",
        "人体器官",
        "黑客",
        "木马",
        "钓鱼",
        "money laundering",
        "phishing",
    ),
    RiskTier.LOW: (
        "垃圾",
        "傻逼",
        "草泥马",
        "去死",
        "智障",
        "脑残",
        "白痴",
        "刷单",
        "兼职赚钱",
        "idiot",
        "moron",
    ),
}


class TermSource(Protocol):
    name: str

    def load(self) -> TermLists:
        ...


def parse_term_lists(raw: Any, *, source: str = "config") -> TermLists:
    """Turn ``{"High": [...], "medium": [...]}`` into tier lists.

    Malformed entries are skipped with a warning: unknown tier names,
    non-list values, and non-string or blank terms.
    """
    parsed: TermLists = {}
    if raw is None:
        return parsed
    if not isinstance(raw, Mapping):
        logger.warning("term list from %s is not a mapping; ignoring", source)
        return parsed
    for tier_name, words in raw.items():
        try:
            tier = parse_tier(tier_name)
        except ValueError:
            logger.warning("skipping unknown risk tier %r from %s", tier_name, source)
            continue
        if isinstance(words, str):
            words = [words]
        if not isinstance(words, (list, tuple, set)):
            logger.warning("skipping tier %s from %s: expected a list of strings", tier.value, source)
            continue
        bucket = parsed.setdefault(tier, [])
        skipped = 0
        for word in words:
            if isinstance(word, str) and word.strip():
                bucket.append(word)
            else:
                skipped += 1
        if skipped:
            logger.warning("skipped %d malformed %s-tier entries from %s", skipped, tier.value, source)
    return parsed


@dataclass(frozen=True)
class BuiltinTermSource:
    name: str = "builtin"

    def load(self) -> TermLists:
        return {tier: list(words) for tier, words in BUILTIN_TERMS.items()}


@dataclass(frozen=True)
class MappingTermSource:
    """Per-tier lists handed over by the configuration layer."""

    mapping: Mapping[str, Any] = field(default_factory=dict)
    name: str = "config"

    def load(self) -> TermLists:
        return parse_term_lists(self.mapping, source=self.name)


@dataclass(frozen=True)
class FileTermSource:
    """YAML (or JSON) file with per-tier lists, optionally under a ``words`` key."""

    path: Path
    name: str = "file"

    def load(self) -> TermLists:
        try:
            text = Path(self.path).read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("terms file missing at %s; skipping", self.path)
            return {}
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            logger.warning("failed to parse terms file %s: %s", self.path, exc)
            return {}
        if isinstance(data, Mapping) and isinstance(data.get("words"), Mapping):
            data = data["words"]
        return parse_term_lists(data, source=f"{self.name}:{self.path}")

"""Sensitive-word filtering core: Aho-Corasick matching over a live dictionary."""

from wordguard.moderation.domain.classifier import MatchResult, ReviewPolicy
from wordguard.moderation.domain.pattern_store import TermStatistics
from wordguard.moderation.domain.tiers import RiskTier
from wordguard.moderation.domain.word_filter import FilterOptions, SensitiveWordFilter

__all__ = [
    "FilterOptions",
    "MatchResult",
    "ReviewPolicy",
    "RiskTier",
    "SensitiveWordFilter",
    "TermStatistics",
]

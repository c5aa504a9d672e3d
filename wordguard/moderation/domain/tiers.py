"""Risk tiers assigned to dictionary terms."""

from __future__ import annotations

from enum import Enum


class RiskTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def parse_tier(value: "str | RiskTier") -> RiskTier:
    """Resolve ``High`` / ``medium`` / ``LOW`` style names to a tier.

    Raises ``ValueError`` for anything else so bulk loaders can skip the entry.
    """
    if isinstance(value, RiskTier):
        return value
    if not isinstance(value, str):
        raise ValueError(f"unknown risk tier: {value!r}")
    try:
        return RiskTier(value.strip().lower())
    except ValueError:
        raise ValueError(f"unknown risk tier: {value!r}") from None

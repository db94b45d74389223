"""Membership tiers and the hierarchical access rule.

A user passes a check when their tier ranks at or above the required tier.
Anything that is not one of the four known names ranks 0, below every real tier,
so bad data in the accounts table can only ever reduce access.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Tier(str, Enum):
    AFFILIATE = "AFFILIATE"
    VIP = "VIP"
    MASTER = "MASTER"
    ELITE = "ELITE"


TIER_RANK: Dict[str, int] = {
    Tier.AFFILIATE.value: 1,
    Tier.VIP.value: 2,
    Tier.MASTER.value: 3,
    Tier.ELITE.value: 4,
}
VALID_TIERS: Tuple[str, ...] = tuple(TIER_RANK)

DEFAULT_TIER: str = Tier.AFFILIATE.value

# Rank of unknown tier strings. Real ranks start at 1.
UNKNOWN_RANK = 0


def normalize(value: Any) -> str:
    """Trim and uppercase a tier name. None/empty -> ""."""
    if value is None:
        return ""
    if isinstance(value, Tier):
        return value.value
    return str(value).strip().upper()


def resolve_tier(value: Optional[Any], default: str = DEFAULT_TIER) -> str:
    """Normalize a user-supplied tier, falling back to `default` when absent.

    Only a missing or empty value takes the default. Whitespace-only input
    normalizes to "" and is left for the caller to reject.
    """
    if value is None or value == "":
        return normalize(default)
    return normalize(value)


def is_valid(tier: Any) -> bool:
    return normalize(tier) in TIER_RANK


def rank_of(tier: Any) -> int:
    return TIER_RANK.get(normalize(tier), UNKNOWN_RANK)


def allowed(user_tier: Any, required_tier: Any) -> bool:
    return rank_of(user_tier) >= rank_of(required_tier)

"""Tier table and the arithmetic rules built on it."""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from hotelman.exceptions import ValidationError
from hotelman.models import LoyaltyTier

# 1 point per currency unit spent (before the tier multiplier)
POINTS_PER_CURRENCY_UNIT = 1

# Redemption rate: 100 points = 10 currency units of reward value
REWARD_POINTS_UNIT = 100
REWARD_VALUE_PER_UNIT = Decimal("10")

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class TierRule:
    """One row of the tier table."""

    tier: str
    min_points: int
    max_points: int | None  # None = open-ended
    bonus_multiplier: Decimal
    discount_percent: int

    @property
    def name(self) -> str:
        return LoyaltyTier(self.tier).label

    def as_dict(self) -> dict:
        return {
            "name": str(self.name),
            "min_points": self.min_points,
            "max_points": self.max_points,
            "bonus_multiplier": float(self.bonus_multiplier),
            "discount": self.discount_percent,
        }


# Ordered lowest to highest; ranges are closed and non-overlapping
TIER_RULES = (
    TierRule(LoyaltyTier.BRONZE.value, 0, 999, Decimal("1.0"), 0),
    TierRule(LoyaltyTier.SILVER.value, 1000, 4999, Decimal("1.25"), 5),
    TierRule(LoyaltyTier.GOLD.value, 5000, 14999, Decimal("1.5"), 10),
    TierRule(LoyaltyTier.PLATINUM.value, 15000, None, Decimal("2.0"), 15),
)

_RULES_BY_TIER = {rule.tier: rule for rule in TIER_RULES}
_RANK = {rule.tier: index for index, rule in enumerate(TIER_RULES)}


def rule_for(tier: str) -> TierRule:
    """Tier table row for ``tier``. Raises ValidationError for unknown tiers."""
    if not is_valid_tier(tier):
        raise ValidationError("INVALID_TIER", tier=str(tier), allowed=list(_RULES_BY_TIER))
    return _RULES_BY_TIER[tier]


def is_valid_tier(tier) -> bool:
    return isinstance(tier, str) and tier in _RULES_BY_TIER


def tier_for_points(points: int) -> str:
    """Highest tier whose lower bound ``points`` meets or exceeds."""
    for rule in reversed(TIER_RULES):
        if points >= rule.min_points:
            return rule.tier
    return TIER_RULES[0].tier


def bonus_multiplier(tier: str) -> Decimal:
    return rule_for(tier).bonus_multiplier


def is_upgrade(previous: str, current: str) -> bool:
    """True when ``current`` ranks above ``previous``."""
    return _RANK[current] > _RANK[previous]


def next_tier(tier: str) -> TierRule | None:
    """Tier above ``tier``, or None at the top."""
    index = _RANK[rule_for(tier).tier] + 1
    if index < len(TIER_RULES):
        return TIER_RULES[index]
    return None


def points_to_next_tier(points: int) -> int | None:
    """Points still needed to reach the tier above the one ``points`` maps to."""
    upcoming = next_tier(tier_for_points(points))
    if upcoming is None:
        return None
    return upcoming.min_points - points


def points_for_amount(amount: Decimal, tier: str) -> int:
    """
    Points earned for spending ``amount`` at ``tier``.

    floor(amount * POINTS_PER_CURRENCY_UNIT * tier multiplier). Direct point
    awards never go through here.
    """
    raw = Decimal(amount) * POINTS_PER_CURRENCY_UNIT * bonus_multiplier(tier)
    return math.floor(raw)


def reward_value(points: int) -> Decimal:
    """Monetary value of redeeming ``points``, rounded to cents."""
    value = Decimal(points) / REWARD_POINTS_UNIT * REWARD_VALUE_PER_UNIT
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def tier_config() -> dict:
    """Tier table as a JSON-serializable dict keyed by tier."""
    return {rule.tier: rule.as_dict() for rule in TIER_RULES}

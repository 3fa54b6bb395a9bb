"""Result types returned by LoyaltyService."""

from dataclasses import asdict, dataclass, field
from decimal import Decimal

from hotelman.loyalty.tiers import tier_config
from hotelman.models import Guest


def guest_summary(guest: Guest) -> dict:
    """Loyalty-relevant guest fields as a JSON-friendly dict."""
    return {
        "code": guest.code,
        "name": guest.name,
        "email": guest.email,
        "phone": guest.phone,
        "branch": guest.branch.code if guest.branch_id else None,
        "is_vip": guest.is_vip,
        "loyalty_points": guest.loyalty_points,
        "loyalty_tier": guest.loyalty_tier,
        "total_stays": guest.total_stays,
        "total_spent": guest.total_spent,
        "last_visit": guest.last_visit,
    }


@dataclass
class EarnResult:
    guest: Guest
    points_added: int
    previous_points: int
    new_balance: int
    previous_tier: str
    new_tier: str
    tier_upgrade: bool

    @property
    def message(self) -> str:
        if self.tier_upgrade:
            return f"Guest upgraded to {self.new_tier}!"
        return "Points added successfully"

    def as_dict(self) -> dict:
        return {
            "message": self.message,
            "guest": guest_summary(self.guest),
            "points_added": self.points_added,
            "new_balance": self.new_balance,
            "new_tier": self.new_tier,
            "tier_upgrade": self.tier_upgrade,
        }


@dataclass
class RedeemResult:
    guest: Guest
    points_redeemed: int
    new_balance: int
    previous_tier: str
    new_tier: str
    reward_value: Decimal
    reward_id: str = ""

    @property
    def message(self) -> str:
        return f"Redeemed {self.points_redeemed} points for {self.reward_value} value"

    def as_dict(self) -> dict:
        return {
            "message": self.message,
            "guest": guest_summary(self.guest),
            "new_balance": self.new_balance,
            "new_tier": self.new_tier,
            "redemption": {
                "points_redeemed": self.points_redeemed,
                "reward_value": self.reward_value,
                "reward_id": self.reward_id,
            },
        }


@dataclass
class TierAdjustment:
    guest: Guest
    previous_tier: str
    new_tier: str
    reason: str = ""

    @property
    def message(self) -> str:
        return f"Tier adjusted from {self.previous_tier} to {self.new_tier}"

    def as_dict(self) -> dict:
        return {
            "message": self.message,
            "guest": guest_summary(self.guest),
            "previous_tier": self.previous_tier,
            "new_tier": self.new_tier,
        }


@dataclass
class PointsChange:
    """Result of bonus, deduction and removal (no tier recomputation)."""

    guest: Guest
    action: str
    points_requested: int
    points_applied: int  # signed delta actually written
    previous_balance: int
    new_balance: int

    @property
    def message(self) -> str:
        if self.points_applied >= 0:
            return f"Added {self.points_applied} points"
        return f"Removed {-self.points_applied} points"

    def as_dict(self) -> dict:
        return {
            "message": self.message,
            "guest": guest_summary(self.guest),
            "action": self.action,
            "points_requested": self.points_requested,
            "points_applied": self.points_applied,
            "new_balance": self.new_balance,
        }


@dataclass
class MemberStats:
    total_members: int
    total_points: int
    total_value: int
    expiring_points: int
    recent_tier_changes: int
    avg_points_per_member: int
    avg_spend_per_member: int

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class MemberListing:
    members: list[Guest]
    tier_stats: dict[str, int]
    stats: MemberStats | None = None
    top_spenders: list[Guest] = field(default_factory=list)
    most_loyal: list[Guest] = field(default_factory=list)

    def as_dict(self) -> dict:
        data = {
            "members": [guest_summary(g) for g in self.members],
            "tier_config": tier_config(),
            "tier_stats": self.tier_stats,
        }
        if self.stats is not None:
            data["stats"] = self.stats.as_dict()
            data["top_spenders"] = [guest_summary(g) for g in self.top_spenders]
            data["most_loyal"] = [guest_summary(g) for g in self.most_loyal]
        return data


@dataclass
class MemberSummary:
    """One guest's standing in the programme."""

    guest: Guest
    tier: str
    tier_name: str
    discount_percent: int
    bonus_multiplier: Decimal
    next_tier: str | None
    points_to_next_tier: int | None

    def as_dict(self) -> dict:
        return {
            "guest": guest_summary(self.guest),
            "tier": self.tier,
            "tier_name": self.tier_name,
            "discount": self.discount_percent,
            "bonus_multiplier": self.bonus_multiplier,
            "next_tier": self.next_tier,
            "points_to_next_tier": self.points_to_next_tier,
        }

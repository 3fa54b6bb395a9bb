"""
Hotelman Loyalty - points, tiers and redemptions for hotel guests.

Tiers follow the point balance (bronze 0+, silver 1000+, gold 5000+,
platinum 15000+) and set the earning multiplier for money spent.

Usage:
    from hotelman.loyalty import LoyaltyService

    LoyaltyService.earn_points("GST-001", amount=Decimal("1000"), reason="stay")
    LoyaltyService.redeem_points("GST-001", 500, reward_id="spa-voucher")
    LoyaltyService.adjust_tier("GST-001", "gold", reason="Corporate agreement")
    listing = LoyaltyService.list_members(branch_code="DOWNTOWN", include_stats=True)
"""


def __getattr__(name):
    if name == "LoyaltyService":
        from hotelman.loyalty.service import LoyaltyService

        return LoyaltyService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["LoyaltyService"]

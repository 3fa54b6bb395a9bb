"""
Django Hotelman - Hotel guest loyalty.

Usage:
    from hotelman import LoyaltyService
    from hotelman.loyalty.commands import EarnPoints, execute

    result = LoyaltyService.earn_points("GST-001", amount=Decimal("250.00"), reason="stay")
    LoyaltyService.redeem_points("GST-001", 200, staff_id="staff-7")

    # Same operation through the command layer
    execute(EarnPoints(guest_code="GST-001", points=100, reason="promo"))
"""


def __getattr__(name):
    if name == "LoyaltyService":
        from hotelman.loyalty.service import LoyaltyService

        return LoyaltyService
    if name == "HotelmanError":
        from hotelman.exceptions import HotelmanError

        return HotelmanError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["LoyaltyService", "HotelmanError"]
__version__ = "0.1.0"

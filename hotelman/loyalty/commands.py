"""
Loyalty commands: one dataclass per operation, one dispatch entry point.

Usage:
    from hotelman.loyalty.commands import RedeemPoints, execute

    result = execute(RedeemPoints(guest_code="GST-001", points=500, staff_id="staff-7"))

    # From a JSON body carrying an "action" name
    command = command_from_payload("redeem", {"guest_code": "GST-001", "points": 500})
    result = execute(command)
"""

from dataclasses import MISSING, dataclass, fields
from functools import singledispatch

from hotelman.exceptions import ValidationError
from hotelman.loyalty.service import LoyaltyService


@dataclass(frozen=True)
class LoyaltyCommand:
    """Base class of all loyalty commands."""

    @classmethod
    def from_payload(cls, payload: dict) -> "LoyaltyCommand":
        """
        Build the command from a decoded JSON object.

        Unknown keys are ignored. Missing required fields raise ValidationError.
        """
        if not isinstance(payload, dict):
            raise ValidationError("INVALID_INPUT", message="Expected a JSON object")

        kwargs = {}
        missing = []
        for f in fields(cls):
            if f.name in payload and payload[f.name] is not None:
                kwargs[f.name] = payload[f.name]
            elif f.default is MISSING and f.default_factory is MISSING:
                missing.append(f.name)

        if missing:
            raise ValidationError(
                "INVALID_INPUT",
                message=f"Missing required fields: {', '.join(missing)}",
                missing=missing,
            )
        return cls(**kwargs)


@dataclass(frozen=True)
class EarnPoints(LoyaltyCommand):
    guest_code: str
    points: int | None = None
    amount: object = None
    reason: str = ""
    staff_id: str = ""
    branch_code: str | None = None


@dataclass(frozen=True)
class RedeemPoints(LoyaltyCommand):
    guest_code: str
    points: int
    staff_id: str = ""
    branch_code: str | None = None
    reward_id: str = ""


@dataclass(frozen=True)
class AdjustTier(LoyaltyCommand):
    guest_code: str
    new_tier: str
    reason: str = ""
    staff_id: str = ""
    branch_code: str | None = None


@dataclass(frozen=True)
class AddBonusPoints(LoyaltyCommand):
    guest_code: str
    points: int
    reason: str = ""
    staff_id: str = ""
    branch_code: str | None = None


@dataclass(frozen=True)
class DeductPoints(LoyaltyCommand):
    guest_code: str
    points: int
    reason: str = ""
    staff_id: str = ""
    branch_code: str | None = None


@dataclass(frozen=True)
class RemovePoints(LoyaltyCommand):
    guest_code: str
    points: int
    reason: str = ""


@dataclass(frozen=True)
class ListMembers(LoyaltyCommand):
    branch_code: str | None = None
    tier: str | None = None
    include_stats: bool = False
    guest_code: str | None = None


# Transport action names accepted by the PUT endpoint
ACTIONS: dict[str, type[LoyaltyCommand]] = {
    "redeem": RedeemPoints,
    "adjust_tier": AdjustTier,
    "bonus": AddBonusPoints,
    "deduct": DeductPoints,
}


def command_from_payload(action: str, payload: dict) -> LoyaltyCommand:
    """Build the command registered for ``action``."""
    try:
        command_cls = ACTIONS[action]
    except (KeyError, TypeError):
        raise ValidationError("INVALID_ACTION", action=str(action), allowed=list(ACTIONS))
    return command_cls.from_payload(payload)


@singledispatch
def execute(command):
    """Run a loyalty command and return the service result."""
    raise ValidationError(
        "INVALID_ACTION",
        message=f"Unsupported command: {type(command).__name__}",
    )


@execute.register
def _(command: EarnPoints):
    return LoyaltyService.earn_points(
        command.guest_code,
        points=command.points,
        amount=command.amount,
        reason=command.reason,
        staff_id=command.staff_id,
        branch_code=command.branch_code,
    )


@execute.register
def _(command: RedeemPoints):
    return LoyaltyService.redeem_points(
        command.guest_code,
        command.points,
        staff_id=command.staff_id,
        branch_code=command.branch_code,
        reward_id=command.reward_id,
    )


@execute.register
def _(command: AdjustTier):
    return LoyaltyService.adjust_tier(
        command.guest_code,
        command.new_tier,
        reason=command.reason,
        staff_id=command.staff_id,
        branch_code=command.branch_code,
    )


@execute.register
def _(command: AddBonusPoints):
    return LoyaltyService.add_bonus_points(
        command.guest_code,
        command.points,
        reason=command.reason,
        staff_id=command.staff_id,
        branch_code=command.branch_code,
    )


@execute.register
def _(command: DeductPoints):
    return LoyaltyService.deduct_points(
        command.guest_code,
        command.points,
        reason=command.reason,
        staff_id=command.staff_id,
        branch_code=command.branch_code,
    )


@execute.register
def _(command: RemovePoints):
    return LoyaltyService.remove_points(
        command.guest_code,
        command.points,
        reason=command.reason,
    )


@execute.register
def _(command: ListMembers):
    return LoyaltyService.list_members(
        branch_code=command.branch_code,
        tier=command.tier,
        include_stats=command.include_stats,
        guest_code=command.guest_code,
    )


def _check_handlers():
    """Every concrete command class must have its own handler."""
    unhandled = [
        cls.__name__
        for cls in LoyaltyCommand.__subclasses__()
        if execute.dispatch(cls) is execute.dispatch(LoyaltyCommand)
    ]
    if unhandled:
        raise TypeError(f"Loyalty commands without a handler: {unhandled}")


_check_handlers()

"""Loyalty service: point accrual, redemption and tier management."""

import calendar
import logging
from collections import Counter
from contextlib import contextmanager
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import DatabaseError, transaction
from django.db.models import F, Sum
from django.utils import timezone

from hotelman.conf import hotelman_settings
from hotelman.exceptions import InsufficientBalanceError, InternalError, ValidationError
from hotelman.loyalty import tiers
from hotelman.loyalty.results import (
    EarnResult,
    MemberListing,
    MemberStats,
    MemberSummary,
    PointsChange,
    RedeemResult,
    TierAdjustment,
)
from hotelman.models import ActivityAction, ActivityLog, Guest, LoyaltyTier, NotificationKind
from hotelman.services import guest as guest_service
from hotelman.services.activity import ActivityLogService
from hotelman.services.notification import NotificationService
from hotelman.signals import points_changed, tier_changed

logger = logging.getLogger(__name__)

STAY_REASON = "stay"

# Storage limits of Guest.loyalty_points and Guest.total_spent
MAX_POINTS = 2_147_483_647
MAX_AMOUNT = Decimal("9999999999.99")
_CENTS = Decimal("0.01")


@contextmanager
def _atomic(operation: str, guest_code: str):
    """
    Run a loyalty mutation in one transaction.

    Database failures are logged and surfaced as InternalError after the
    transaction has rolled back.
    """
    try:
        with transaction.atomic():
            yield
    except DatabaseError as exc:
        logger.exception("Loyalty %s failed for guest %s", operation, guest_code)
        raise InternalError(operation=operation, guest_code=guest_code) from exc


def _require_points(points) -> int:
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        raise ValidationError("INVALID_POINTS", points=repr(points))
    if points > MAX_POINTS:
        raise ValidationError("INVALID_POINTS", points=points, max_points=MAX_POINTS)
    return points


def _require_amount(amount) -> Decimal:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise ValidationError("INVALID_AMOUNT", amount=repr(amount))
    if isinstance(amount, bool) or not value.is_finite() or value <= 0:
        raise ValidationError("INVALID_AMOUNT", amount=repr(amount))
    # At most 10 integer digits and 2 decimal places
    if value > MAX_AMOUNT or value != value.quantize(_CENTS):
        raise ValidationError("INVALID_AMOUNT", amount=str(value))
    return value


def _require_balance(balance: int) -> int:
    if balance > MAX_POINTS:
        raise ValidationError("INVALID_POINTS", new_balance=balance, max_points=MAX_POINTS)
    return balance


def _months_ago(now: datetime, months: int) -> datetime:
    """Same day-of-month ``months`` earlier, clamped to the month's last day."""
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def _rounded(value) -> int:
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class LoyaltyService:
    """
    Service for loyalty programme operations.

    Uses @classmethod for extensibility (consistent with the other services).
    Every mutation locks the guest row, writes the balance as an atomic
    increment guarded by Guest.version and appends its activity log entry in
    the same transaction.
    """

    # ======================================================================
    # Mutations
    # ======================================================================

    @classmethod
    def earn_points(
        cls,
        guest_code: str,
        points: int | None = None,
        amount=None,
        reason: str = "",
        staff_id: str = "",
        branch_code: str | None = None,
    ) -> EarnResult:
        """
        Award points for a stay, a purchase or a direct grant.

        When ``amount`` is given the award is
        floor(amount * points per unit * tier multiplier) and ``points`` is
        ignored. A direct ``points`` award gets no multiplier.

        Any tier change is logged as ``tier_upgrade`` and notified, including
        a move down from a manually adjusted tier.

        Args:
            guest_code: Guest code
            points: Points to award directly (positive)
            amount: Money spent (positive)
            reason: Why points are earned ("stay" also counts a stay)
            staff_id: Acting staff member
            branch_code: Branch the action happens in (defaults to guest's)

        Returns:
            EarnResult with the applied delta, new balance and tier

        Raises:
            ValidationError: Neither or invalid points/amount
            NotFoundError: Guest not found
            ConcurrencyConflict: Guest changed concurrently
            InternalError: Persistence failure
        """
        if points is None and amount is None:
            raise ValidationError("MISSING_POINTS_OR_AMOUNT")
        if points is not None:
            points = _require_points(points)
        if amount is not None:
            amount = _require_amount(amount)

        with _atomic("earn_points", guest_code):
            guest = guest_service.get_for_update(guest_code)
            branch = guest_service.get_branch(branch_code) or guest.branch
            previous_points = guest.loyalty_points
            previous_tier = guest.loyalty_tier

            if amount is not None:
                points_added = tiers.points_for_amount(amount, previous_tier)
            else:
                points_added = points

            _require_balance(previous_points + points_added)
            if amount is not None and guest.total_spent + amount > MAX_AMOUNT:
                raise ValidationError(
                    "INVALID_AMOUNT",
                    amount=str(amount),
                    total_spent=str(guest.total_spent),
                )

            new_tier = tiers.tier_for_points(previous_points + points_added)
            tier_moved = new_tier != previous_tier

            extra = {"last_visit": timezone.now()}
            if reason == STAY_REASON:
                extra["total_stays"] = F("total_stays") + 1
            if amount is not None:
                extra["total_spent"] = F("total_spent") + amount

            guest = guest_service.atomic_update_points(
                guest,
                points_added,
                new_tier=new_tier if tier_moved else None,
                **extra,
            )

            ActivityLogService.append(
                actor=staff_id,
                branch=branch,
                action=ActivityAction.TIER_UPGRADE if tier_moved else ActivityAction.POINTS_EARNED,
                entity_id=guest.code,
                details={
                    "points_added": points_added,
                    "previous_points": previous_points,
                    "new_points": guest.loyalty_points,
                    "reason": reason,
                    "amount": str(amount) if amount is not None else None,
                    "tier_change": (
                        {"from": previous_tier, "to": new_tier} if tier_moved else None
                    ),
                },
            )

            if tier_moved:
                NotificationService.create(
                    recipient=staff_id,
                    branch=branch,
                    kind=NotificationKind.SUCCESS,
                    title="Tier Upgrade!",
                    message=(
                        f"{guest.name} has been upgraded to "
                        f"{tiers.rule_for(new_tier).name} tier!"
                    ),
                )

        logger.info(
            "Guest %s earned %s points (%s -> %s, tier %s -> %s)",
            guest.code, points_added, previous_points, guest.loyalty_points,
            previous_tier, guest.loyalty_tier,
        )
        points_changed.send(
            sender=Guest, guest=guest, delta=points_added, action="earn"
        )
        if tier_moved:
            tier_changed.send(
                sender=Guest, guest=guest, previous=previous_tier,
                current=new_tier, source="earn",
            )

        return EarnResult(
            guest=guest,
            points_added=points_added,
            previous_points=previous_points,
            new_balance=guest.loyalty_points,
            previous_tier=previous_tier,
            new_tier=guest.loyalty_tier,
            tier_upgrade=tier_moved,
        )

    @classmethod
    def redeem_points(
        cls,
        guest_code: str,
        points: int,
        staff_id: str = "",
        branch_code: str | None = None,
        reward_id: str = "",
    ) -> RedeemResult:
        """
        Exchange points for reward value (100 points = 10 currency units).

        The tier is recomputed from the new balance in the downgrade
        direction only: a redemption can demote the guest but never promotes
        a manually lowered tier. Demotions create no notification.

        Raises:
            ValidationError: points <= 0
            NotFoundError: Guest not found
            InsufficientBalanceError: Balance lower than points
            ConcurrencyConflict: Guest changed concurrently
            InternalError: Persistence failure
        """
        points = _require_points(points)

        with _atomic("redeem_points", guest_code):
            guest = guest_service.get_for_update(guest_code)
            branch = guest_service.get_branch(branch_code) or guest.branch

            if guest.loyalty_points < points:
                raise InsufficientBalanceError(
                    available=guest.loyalty_points,
                    requested=points,
                )

            previous_points = guest.loyalty_points
            previous_tier = guest.loyalty_tier
            value = tiers.reward_value(points)
            new_tier = tiers.tier_for_points(previous_points - points)
            if not tiers.is_upgrade(new_tier, previous_tier):
                new_tier = previous_tier
            tier_moved = new_tier != previous_tier

            guest = guest_service.atomic_update_points(
                guest,
                -points,
                new_tier=new_tier if tier_moved else None,
            )

            ActivityLogService.append(
                actor=staff_id,
                branch=branch,
                action=ActivityAction.POINTS_REDEEMED,
                entity_id=guest.code,
                details={
                    "points_redeemed": points,
                    "reward_value": str(value),
                    "reward_id": reward_id or None,
                    "previous_points": previous_points,
                    "new_points": guest.loyalty_points,
                    "tier_change": (
                        {"from": previous_tier, "to": new_tier} if tier_moved else None
                    ),
                },
            )

        logger.info(
            "Guest %s redeemed %s points for %s (tier %s -> %s)",
            guest.code, points, value, previous_tier, guest.loyalty_tier,
        )
        points_changed.send(sender=Guest, guest=guest, delta=-points, action="redeem")
        if tier_moved:
            tier_changed.send(
                sender=Guest, guest=guest, previous=previous_tier,
                current=new_tier, source="redeem",
            )

        return RedeemResult(
            guest=guest,
            points_redeemed=points,
            new_balance=guest.loyalty_points,
            previous_tier=previous_tier,
            new_tier=guest.loyalty_tier,
            reward_value=value,
            reward_id=reward_id,
        )

    @classmethod
    def adjust_tier(
        cls,
        guest_code: str,
        new_tier: str,
        reason: str = "",
        staff_id: str = "",
        branch_code: str | None = None,
    ) -> TierAdjustment:
        """
        Manually set the tier, regardless of the point balance.

        The override holds until the next earn recomputes the tier.
        """
        new_tier = tiers.rule_for(new_tier).tier

        with _atomic("adjust_tier", guest_code):
            guest = guest_service.get_for_update(guest_code)
            branch = guest_service.get_branch(branch_code) or guest.branch
            previous_tier = guest.loyalty_tier

            guest = guest_service.set_tier(guest, new_tier)

            ActivityLogService.append(
                actor=staff_id,
                branch=branch,
                action=ActivityAction.TIER_ADJUSTED,
                entity_id=guest.code,
                details={"from": previous_tier, "to": new_tier, "reason": reason},
            )

        logger.info(
            "Guest %s tier adjusted %s -> %s by %s",
            guest.code, previous_tier, new_tier, staff_id or "-",
        )
        if previous_tier != new_tier:
            tier_changed.send(
                sender=Guest, guest=guest, previous=previous_tier,
                current=new_tier, source="manual",
            )

        return TierAdjustment(
            guest=guest,
            previous_tier=previous_tier,
            new_tier=new_tier,
            reason=reason,
        )

    @classmethod
    def add_bonus_points(
        cls,
        guest_code: str,
        points: int,
        reason: str = "",
        staff_id: str = "",
        branch_code: str | None = None,
    ) -> PointsChange:
        """
        Add promotional points.

        No tier multiplier and no tier recomputation; callers that need the
        tier to follow the balance use earn_points(). Negative bonuses are
        not accepted, see deduct_points().
        """
        points = _require_points(points)
        return cls._apply_untiered_change(
            "add_bonus_points",
            guest_code,
            delta=points,
            action=ActivityAction.BONUS_POINTS,
            details={"bonus_points": points, "reason": reason},
            staff_id=staff_id,
            branch_code=branch_code,
        )

    @classmethod
    def deduct_points(
        cls,
        guest_code: str,
        points: int,
        reason: str = "",
        staff_id: str = "",
        branch_code: str | None = None,
    ) -> PointsChange:
        """
        Take points away as a staff correction.

        Rejects deductions larger than the balance. Like bonuses, the tier
        is left as is.

        Raises:
            InsufficientBalanceError: Balance lower than points
        """
        points = _require_points(points)
        return cls._apply_untiered_change(
            "deduct_points",
            guest_code,
            delta=-points,
            action=ActivityAction.POINTS_DEDUCTED,
            details={"points_deducted": points, "reason": reason},
            staff_id=staff_id,
            branch_code=branch_code,
            strict=True,
        )

    @classmethod
    def remove_points(
        cls,
        guest_code: str,
        points: int,
        reason: str = "",
    ) -> PointsChange:
        """
        Claw points back (e.g. booking cancellation).

        The balance is clamped at zero without error. The tier is not
        recomputed.
        """
        points = _require_points(points)
        return cls._apply_untiered_change(
            "remove_points",
            guest_code,
            delta=-points,
            action=ActivityAction.POINTS_REMOVED,
            details={"points_requested": points, "reason": reason},
            staff_id=hotelman_settings.SYSTEM_ACTOR,
        )

    @classmethod
    def _apply_untiered_change(
        cls,
        operation: str,
        guest_code: str,
        delta: int,
        action: str,
        details: dict,
        staff_id: str = "",
        branch_code: str | None = None,
        strict: bool = False,
    ) -> PointsChange:
        """
        Shared path of bonus, deduction and removal.

        Negative deltas are clamped at the balance, or rejected when ``strict``.
        """
        with _atomic(operation, guest_code):
            guest = guest_service.get_for_update(guest_code)
            branch = guest_service.get_branch(branch_code) or guest.branch
            previous_points = guest.loyalty_points

            applied = delta
            if previous_points + delta < 0:
                if strict:
                    raise InsufficientBalanceError(
                        available=previous_points,
                        requested=-delta,
                    )
                applied = -previous_points
            _require_balance(previous_points + applied)

            guest = guest_service.atomic_update_points(guest, applied)

            ActivityLogService.append(
                actor=staff_id,
                branch=branch,
                action=action,
                entity_id=guest.code,
                details={
                    **details,
                    "points_applied": applied,
                    "previous_points": previous_points,
                    "new_points": guest.loyalty_points,
                },
            )

        logger.info(
            "Guest %s %s: %s points (%s -> %s)",
            guest.code, action, applied, previous_points, guest.loyalty_points,
        )
        points_changed.send(sender=Guest, guest=guest, delta=applied, action=action)

        return PointsChange(
            guest=guest,
            action=action,
            points_requested=abs(delta),
            points_applied=applied,
            previous_balance=previous_points,
            new_balance=guest.loyalty_points,
        )

    # ======================================================================
    # Queries
    # ======================================================================

    @classmethod
    def list_members(
        cls,
        branch_code: str | None = None,
        tier: str | None = None,
        include_stats: bool = False,
        guest_code: str | None = None,
    ) -> MemberListing:
        """
        List programme members with per-tier counts and optional statistics.

        Expiring points and recent tier changes are scoped by branch only,
        not by the tier or guest filters.
        """
        if tier:
            tier = tiers.rule_for(tier).tier

        members = list(
            guest_service.list_guests(branch_code=branch_code, tier=tier, code=guest_code)
        )

        counts = Counter(g.loyalty_tier for g in members)
        tier_stats = {value: counts.get(value, 0) for value in LoyaltyTier.values}

        listing = MemberListing(members=members, tier_stats=tier_stats)
        if not include_stats:
            return listing

        total_points = sum(g.loyalty_points for g in members)
        total_value = sum((g.total_spent for g in members), Decimal("0"))
        count = len(members)

        cutoff = _months_ago(timezone.now(), hotelman_settings.POINTS_EXPIRY_MONTHS)
        expiring = (
            guest_service.list_guests(branch_code=branch_code)
            .filter(last_visit__lt=cutoff, loyalty_points__gt=0)
            .aggregate(total=Sum("loyalty_points"))["total"]
        )

        listing.stats = MemberStats(
            total_members=count,
            total_points=total_points,
            total_value=_rounded(total_value),
            expiring_points=expiring or 0,
            recent_tier_changes=ActivityLogService.count_recent(
                ActivityAction.TIER_UPGRADE,
                days=hotelman_settings.TIER_CHANGE_WINDOW_DAYS,
                branch_code=branch_code,
            ),
            avg_points_per_member=_rounded(Decimal(total_points) / count) if count else 0,
            avg_spend_per_member=_rounded(total_value / count) if count else 0,
        )

        size = hotelman_settings.LEADERBOARD_SIZE
        listing.top_spenders = sorted(members, key=lambda g: g.total_spent, reverse=True)[:size]
        listing.most_loyal = sorted(members, key=lambda g: g.total_stays, reverse=True)[:size]
        return listing

    @classmethod
    def get_member(cls, guest_code: str) -> MemberSummary:
        """Programme standing of one guest (stored tier, benefits, next tier)."""
        guest = guest_service.get_or_raise(guest_code)
        rule = tiers.rule_for(guest.loyalty_tier)
        upcoming = tiers.next_tier(rule.tier)

        return MemberSummary(
            guest=guest,
            tier=rule.tier,
            tier_name=str(rule.name),
            discount_percent=rule.discount_percent,
            bonus_multiplier=rule.bonus_multiplier,
            next_tier=upcoming.tier if upcoming else None,
            points_to_next_tier=(
                max(0, upcoming.min_points - guest.loyalty_points) if upcoming else None
            ),
        )

    @classmethod
    def get_history(cls, guest_code: str, limit: int = 50) -> list[ActivityLog]:
        """Loyalty activity of a guest, most recent first."""
        guest = guest_service.get_or_raise(guest_code)
        return ActivityLogService.for_entity(guest.code, limit=limit)

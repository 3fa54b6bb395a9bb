"""Guest persistence - lookups and the atomic points update.

atomic_update_points() is the only writer of Guest.loyalty_points.
"""

import logging

from django.db.models import F
from django.utils import timezone

from hotelman.exceptions import ConcurrencyConflict, NotFoundError, ValidationError
from hotelman.models import Branch, Guest

logger = logging.getLogger(__name__)


def get(code: str) -> Guest | None:
    """Get active guest by unique code."""
    try:
        return Guest.objects.select_related("branch").get(code=code, is_active=True)
    except Guest.DoesNotExist:
        return None


def get_or_raise(code: str) -> Guest:
    """Get active guest by code or raise NotFoundError."""
    guest = get(code)
    if guest is None:
        raise NotFoundError(guest_code=code)
    return guest


def get_for_update(code: str) -> Guest:
    """
    Get active guest with a row-level lock.

    MUST be called inside transaction.atomic().
    """
    try:
        return (
            Guest.objects
            .select_for_update()
            .select_related("branch")
            .get(code=code, is_active=True)
        )
    except Guest.DoesNotExist:
        raise NotFoundError(guest_code=code)


def get_branch(code: str | None) -> Branch | None:
    """Resolve an optional branch code. Raises ValidationError for unknown codes."""
    if not code:
        return None
    try:
        return Branch.objects.get(code=code)
    except Branch.DoesNotExist:
        raise ValidationError("BRANCH_NOT_FOUND", branch_code=code)


def atomic_update_points(
    guest: Guest,
    delta: int,
    new_tier: str | None = None,
    **extra_fields,
) -> Guest:
    """
    Apply ``delta`` to the guest's balance as a single UPDATE.

    The balance is written as ``loyalty_points + delta`` in SQL and the row
    is matched on the version ``guest`` was read at, so a concurrent writer
    makes this match zero rows instead of losing its update. ``extra_fields``
    may hold values or expressions (e.g. ``F("total_stays") + 1``).

    Returns the refreshed guest.

    Raises:
        ConcurrencyConflict: If the row changed since ``guest`` was read
    """
    values = {
        "loyalty_points": F("loyalty_points") + delta,
        "version": F("version") + 1,
        "updated_at": timezone.now(),
        **extra_fields,
    }
    if new_tier is not None:
        values["loyalty_tier"] = new_tier

    updated = Guest.objects.filter(pk=guest.pk, version=guest.version).update(**values)
    if not updated:
        logger.warning(
            "Concurrent update on guest %s (version %s)", guest.code, guest.version
        )
        raise ConcurrencyConflict(guest_code=guest.code, version=guest.version)

    guest.refresh_from_db()
    return guest


def set_tier(guest: Guest, tier: str) -> Guest:
    """Overwrite the tier, guarded by the same version check."""
    return atomic_update_points(guest, 0, new_tier=tier)


def list_guests(
    branch_code: str | None = None,
    tier: str | None = None,
    code: str | None = None,
):
    """Active guests matching the filters, highest balance first (QuerySet)."""
    qs = Guest.objects.filter(is_active=True).select_related("branch")
    if branch_code:
        qs = qs.filter(branch__code=branch_code)
    if tier:
        qs = qs.filter(loyalty_tier=tier)
    if code:
        qs = qs.filter(code=code)
    return qs.order_by("-loyalty_points", "first_name")

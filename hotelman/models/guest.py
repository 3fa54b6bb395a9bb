"""Guest model (loyalty view of the guest record).

Data architecture:
    Guest.loyalty_points
        Source of truth for the point balance. Only written through
        hotelman.services.guest.atomic_update_points(), which applies an F()
        increment guarded by the version column.

    Guest.loyalty_tier
        Denormalized from loyalty_points via hotelman.loyalty.tiers. Recomputed
        in the same UPDATE as the balance on earn/redeem. May be overridden by
        LoyaltyService.adjust_tier(); the override holds until the next earn.

    Guest.version
        Compare-and-swap token. Every points/tier write bumps it.
"""

import uuid as uuid_lib

from django.db import models
from django.utils.translation import gettext_lazy as _


class LoyaltyTier(models.TextChoices):
    """Guest loyalty tiers (lowest first)."""

    BRONZE = "bronze", _("Bronze")
    SILVER = "silver", _("Silver")
    GOLD = "gold", _("Gold")
    PLATINUM = "platinum", _("Platinum")


class Guest(models.Model):
    """
    Registered hotel guest.

    Created by guest registration (outside this app). The loyalty engine
    only reads identity fields and updates the loyalty counters.
    """

    # Identification
    code = models.CharField(
        _("code"),
        max_length=50,
        unique=True,
        help_text=_("Unique guest code (e.g. GST-001)"),
    )
    uuid = models.UUIDField(default=uuid_lib.uuid4, editable=False, unique=True)

    # Basic data
    first_name = models.CharField(_("first name"), max_length=100)
    last_name = models.CharField(_("last name"), max_length=100, blank=True)
    email = models.EmailField(_("email"), blank=True, db_index=True)
    phone = models.CharField(_("phone"), max_length=20, blank=True)

    branch = models.ForeignKey(
        "hotelman.Branch",
        on_delete=models.PROTECT,
        related_name="guests",
        null=True,
        blank=True,
        verbose_name=_("branch"),
    )

    # Loyalty
    loyalty_points = models.PositiveIntegerField(
        _("loyalty points"),
        default=0,
        help_text=_("Current point balance"),
    )
    loyalty_tier = models.CharField(
        _("loyalty tier"),
        max_length=20,
        choices=LoyaltyTier.choices,
        default=LoyaltyTier.BRONZE,
        db_index=True,
    )
    total_stays = models.PositiveIntegerField(_("total stays"), default=0)
    total_spent = models.DecimalField(
        _("total spent"),
        max_digits=12,
        decimal_places=2,
        default=0,
    )
    last_visit = models.DateTimeField(_("last visit"), null=True, blank=True)
    version = models.PositiveIntegerField(
        _("version"),
        default=1,
        help_text=_("Optimistic concurrency token"),
    )

    # Status
    is_vip = models.BooleanField(_("VIP"), default=False)
    is_active = models.BooleanField(_("active"), default=True, db_index=True)

    # Audit
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        verbose_name = _("guest")
        verbose_name_plural = _("guests")
        ordering = ["-loyalty_points", "first_name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(loyalty_points__gte=0),
                name="hotelman_guest_points_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.code}): {self.loyalty_points}pts | {self.loyalty_tier}"

    @property
    def name(self) -> str:
        """Full name (first + last)."""
        return f"{self.first_name} {self.last_name}".strip()

"""ActivityLog model: append-only audit trail."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class ActivityAction(models.TextChoices):
    """Loyalty actions recorded in the activity log."""

    POINTS_EARNED = "points_earned", _("Points earned")
    TIER_UPGRADE = "tier_upgrade", _("Tier upgrade")
    POINTS_REDEEMED = "points_redeemed", _("Points redeemed")
    TIER_ADJUSTED = "tier_adjusted", _("Tier adjusted")
    BONUS_POINTS = "bonus_points", _("Bonus points")
    POINTS_DEDUCTED = "points_deducted", _("Points deducted")
    POINTS_REMOVED = "points_removed", _("Points removed")


class ActivityLog(models.Model):
    """
    Immutable record of a change made by staff or the system.

    Every mutating loyalty operation appends one row in the same
    transaction as the guest update. Rows are never modified or deleted.
    """

    actor = models.CharField(
        _("actor"),
        max_length=100,
        blank=True,
        help_text=_("Staff member or system that performed the action"),
    )
    branch = models.ForeignKey(
        "hotelman.Branch",
        on_delete=models.SET_NULL,
        related_name="activity_logs",
        null=True,
        blank=True,
        verbose_name=_("branch"),
    )
    action = models.CharField(
        _("action"),
        max_length=30,
        choices=ActivityAction.choices,
        db_index=True,
    )
    entity = models.CharField(_("entity"), max_length=50, default="guest")
    entity_id = models.CharField(_("entity id"), max_length=100, db_index=True)
    details = models.JSONField(_("details"), default=dict, blank=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("activity log entry")
        verbose_name_plural = _("activity log")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["entity", "entity_id", "-created_at"], name="hotelman_log_entity_idx"),
            models.Index(fields=["action", "created_at"], name="hotelman_log_action_idx"),
        ]

    def __str__(self):
        return f"[{self.action}] {self.entity}:{self.entity_id} by {self.actor or '-'}"

"""Notification model: messages for staff members."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class NotificationKind(models.TextChoices):
    INFO = "info", _("Info")
    SUCCESS = "success", _("Success")
    WARNING = "warning", _("Warning")
    ERROR = "error", _("Error")


class Notification(models.Model):
    """Message addressed to a staff member. Not consumed by the loyalty engine."""

    recipient = models.CharField(
        _("recipient"),
        max_length=100,
        blank=True,
        db_index=True,
        help_text=_("Staff member the notification is addressed to"),
    )
    branch = models.ForeignKey(
        "hotelman.Branch",
        on_delete=models.SET_NULL,
        related_name="notifications",
        null=True,
        blank=True,
        verbose_name=_("branch"),
    )
    kind = models.CharField(
        _("kind"),
        max_length=20,
        choices=NotificationKind.choices,
        default=NotificationKind.INFO,
    )
    title = models.CharField(_("title"), max_length=200)
    message = models.TextField(_("message"))
    is_read = models.BooleanField(_("read"), default=False)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("notification")
        verbose_name_plural = _("notifications")
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.recipient or '-'}: {self.title}"

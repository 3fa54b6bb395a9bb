"""Branch model: one hotel property of the chain."""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Branch(models.Model):
    """Hotel branch. Guests, activity and notifications are scoped to it."""

    code = models.CharField(
        _("code"),
        max_length=50,
        unique=True,
        help_text=_("Unique branch code (e.g. DOWNTOWN)"),
    )
    name = models.CharField(_("name"), max_length=200)
    is_active = models.BooleanField(_("active"), default=True)
    created_at = models.DateTimeField(_("created at"), auto_now_add=True)

    class Meta:
        verbose_name = _("branch")
        verbose_name_plural = _("branches")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.code})"

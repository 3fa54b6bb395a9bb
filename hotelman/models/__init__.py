"""Hotelman models."""

from hotelman.models.branch import Branch
from hotelman.models.guest import Guest, LoyaltyTier
from hotelman.models.activity_log import ActivityLog, ActivityAction
from hotelman.models.notification import Notification, NotificationKind

__all__ = [
    "Branch",
    "Guest",
    "LoyaltyTier",
    # Audit trail
    "ActivityLog",
    "ActivityAction",
    # Staff messages
    "Notification",
    "NotificationKind",
]

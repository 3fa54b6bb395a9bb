"""Hotelman services (persistence collaborators of the loyalty engine).

- hotelman.services.guest: guest lookups and the atomic points update
- hotelman.services.activity: ActivityLogService
- hotelman.services.notification: NotificationService
"""

from hotelman.services import guest
from hotelman.services.activity import ActivityLogService
from hotelman.services.notification import NotificationService

__all__ = ["guest", "ActivityLogService", "NotificationService"]

"""Notification service."""

from hotelman.models import Branch, Notification, NotificationKind


class NotificationService:
    """Create and list staff notifications."""

    @classmethod
    def create(
        cls,
        recipient: str,
        branch: Branch | None,
        title: str,
        message: str,
        kind: str = NotificationKind.INFO,
    ) -> Notification:
        return Notification.objects.create(
            recipient=recipient,
            branch=branch,
            kind=kind,
            title=title,
            message=message,
        )

    @classmethod
    def for_recipient(
        cls,
        recipient: str,
        unread_only: bool = False,
        limit: int = 50,
    ) -> list[Notification]:
        """Notifications addressed to ``recipient``, most recent first."""
        qs = Notification.objects.filter(recipient=recipient)
        if unread_only:
            qs = qs.filter(is_read=False)
        return list(qs[:limit])

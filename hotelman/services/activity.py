"""Activity log service: append and query the audit trail."""

import logging
from datetime import timedelta

from django.utils import timezone

from hotelman.models import ActivityLog, Branch

logger = logging.getLogger(__name__)


class ActivityLogService:
    """
    Service for the append-only activity log.

    Uses @classmethod for extensibility (consistent with the other services).
    Entries are never updated or deleted.
    """

    @classmethod
    def append(
        cls,
        actor: str,
        branch: Branch | None,
        action: str,
        entity_id: str,
        details: dict | None = None,
        entity: str = "guest",
    ) -> ActivityLog:
        """
        Record an action.

        Args:
            actor: Staff member (or system) that performed the action
            branch: Branch the action happened in (optional)
            action: ActivityAction value
            entity_id: Identifier of the affected record (guest code)
            details: Extra data as JSON
            entity: Kind of the affected record

        Returns:
            Created ActivityLog
        """
        entry = ActivityLog.objects.create(
            actor=actor,
            branch=branch,
            action=action,
            entity=entity,
            entity_id=entity_id,
            details=details or {},
        )
        logger.debug("Activity %s on %s:%s by %s", action, entity, entity_id, actor or "-")
        return entry

    @classmethod
    def for_entity(
        cls,
        entity_id: str,
        entity: str = "guest",
        limit: int = 50,
        action: str | None = None,
    ) -> list[ActivityLog]:
        """Entries for one record, most recent first."""
        qs = ActivityLog.objects.filter(entity=entity, entity_id=entity_id)
        if action:
            qs = qs.filter(action=action)
        return list(qs.select_related("branch")[:limit])

    @classmethod
    def count_recent(
        cls,
        action: str,
        days: int,
        branch_code: str | None = None,
    ) -> int:
        """Number of ``action`` entries in the last ``days`` days."""
        since = timezone.now() - timedelta(days=days)
        qs = ActivityLog.objects.filter(action=action, created_at__gte=since)
        if branch_code:
            qs = qs.filter(branch__code=branch_code)
        return qs.count()

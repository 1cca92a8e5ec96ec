import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientInfo:
    """Where a request came from, as recorded in the activity log."""

    ip_address: str | None = None
    user_agent: str | None = None


class ActivityLogService:
    @staticmethod
    def record(
        db: AsyncSession,
        user_id: int,
        action: str,
        client: ClientInfo | None = None,
        entity_type: str | None = None,
        entity_id: int | None = None,
        details: dict | None = None,
    ) -> ActivityLog:
        """Stage an audit entry; it is written with the caller's commit."""
        client = client or ClientInfo()
        user_agent = client.user_agent[:500] if client.user_agent else None
        entry = ActivityLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            ip_address=client.ip_address,
            user_agent=user_agent,
        )
        db.add(entry)
        logger.debug("Activity %s by user %s", action, user_id)
        return entry

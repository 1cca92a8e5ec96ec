import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.models.feedback import Feedback, FeedbackStatus
from campus_voice.models.notification import Notification, NotificationType
from campus_voice.services.activity import ActivityLogService, ClientInfo
from campus_voice.services.feedback import FeedbackService

logger = logging.getLogger(__name__)

STATUS_UPDATE_TITLE = "Feedback Status Updated"


def status_update_message(title: str, status: FeedbackStatus) -> str:
    return f'Your feedback "{title}" status has been updated to {status.value}'


class FeedbackLifecycleService:
    """
    Administrator-driven status changes.

    Any status may move to any other. The new status, the owner's
    notification and the audit entry are committed together: either all
    three are written or none are.
    """

    @staticmethod
    async def transition(
        db: AsyncSession,
        feedback_id: int,
        status: FeedbackStatus,
        admin_response: str | None = None,
        actor_id: int | None = None,
        client: ClientInfo | None = None,
    ) -> Feedback:
        feedback = await FeedbackService.load(db, feedback_id)
        previous = feedback.status

        feedback.status = status
        if admin_response is not None:
            feedback.admin_response = admin_response
        # resolved_at tracks only the latest transition; earlier resolutions
        # remain in the activity log
        if status != FeedbackStatus.RESOLVED:
            feedback.resolved_at = None
        elif previous != FeedbackStatus.RESOLVED or feedback.resolved_at is None:
            feedback.resolved_at = datetime.now(timezone.utc)

        db.add(
            Notification(
                user_id=feedback.user_id,
                title=STATUS_UPDATE_TITLE,
                message=status_update_message(feedback.title, status),
                type=NotificationType.FEEDBACK_UPDATE,
                related_id=feedback.id,
            )
        )
        if actor_id is not None:
            ActivityLogService.record(
                db,
                user_id=actor_id,
                action="update_feedback_status",
                client=client,
                entity_type="feedback",
                entity_id=feedback.id,
                details={"from": previous.value, "to": status.value},
            )
        await db.commit()
        logger.info(
            "Feedback %s moved %s -> %s by user %s",
            feedback.id,
            previous.value,
            status.value,
            actor_id,
        )

        return await FeedbackService.load(db, feedback.id)

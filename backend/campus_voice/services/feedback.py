import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import raiseload

from campus_voice.core.exceptions import BadRequestError, NotFoundError
from campus_voice.core.permissions import Operation, is_allowed
from campus_voice.models.category import Category
from campus_voice.models.comment import Comment
from campus_voice.models.feedback import Feedback, FeedbackStatus
from campus_voice.models.notification import Notification
from campus_voice.models.user import User
from campus_voice.models.vote import Vote
from campus_voice.schemas.feedback import FeedbackCreateRequest, FeedbackQuery
from campus_voice.services.activity import ActivityLogService, ClientInfo

logger = logging.getLogger(__name__)

# dashboard stats key per status
_STATUS_KEYS = {
    FeedbackStatus.PENDING: "pending",
    FeedbackStatus.UNDER_REVIEW: "under_review",
    FeedbackStatus.IN_PROGRESS: "in_progress",
    FeedbackStatus.RESOLVED: "resolved",
    FeedbackStatus.REJECTED: "rejected",
}


class FeedbackService:
    @staticmethod
    async def load(db: AsyncSession, feedback_id: int) -> Feedback:
        """Fetch a feedback row with fresh column values and relationships."""
        result = await db.execute(
            select(Feedback)
            .where(Feedback.id == feedback_id)
            .execution_options(populate_existing=True)
        )
        feedback = result.scalar_one_or_none()
        if feedback is None:
            raise NotFoundError("Feedback not found")
        return feedback

    @staticmethod
    async def submit(
        db: AsyncSession,
        owner_id: int,
        data: FeedbackCreateRequest,
        attachments: list[str] | None = None,
        client: ClientInfo | None = None,
    ) -> Feedback:
        """Create a PENDING feedback record and its submit_feedback audit entry."""
        title = data.title.strip()
        description = data.description.strip()
        if not title or not description:
            raise BadRequestError("Title and description are required")

        result = await db.execute(
            select(Category.id).where(
                Category.id == data.category_id,
                Category.is_active.is_(True),
            )
        )
        if result.scalar_one_or_none() is None:
            raise BadRequestError("Category not found")

        feedback = Feedback(
            user_id=owner_id,
            category_id=data.category_id,
            title=title,
            description=description,
            location=data.location or None,
            priority=data.priority,
            status=FeedbackStatus.PENDING,
            is_anonymous=data.is_anonymous,
            attachments=list(attachments) if attachments else None,
        )
        db.add(feedback)
        await db.flush()

        ActivityLogService.record(
            db,
            user_id=owner_id,
            action="submit_feedback",
            client=client,
            entity_type="feedback",
            entity_id=feedback.id,
        )
        await db.commit()
        logger.info("Feedback %s submitted by user %s", feedback.id, owner_id)

        return await FeedbackService.load(db, feedback.id)

    @staticmethod
    async def list_feedback(
        db: AsyncSession, query: FeedbackQuery
    ) -> tuple[list[Feedback], int]:
        """List feedback matching ``query``, newest first."""
        conditions = []

        if query.owner_id is not None:
            conditions.append(Feedback.user_id == query.owner_id)
        if query.status is not None:
            conditions.append(Feedback.status == query.status)
        if query.priority is not None:
            conditions.append(Feedback.priority == query.priority)
        if query.category_id is not None:
            conditions.append(Feedback.category_id == query.category_id)

        # Count
        count_stmt = select(func.count(Feedback.id)).where(*conditions)
        total = (await db.execute(count_stmt)).scalar() or 0

        # Query
        stmt = (
            select(Feedback)
            .where(*conditions)
            .order_by(Feedback.created_at.desc(), Feedback.id.asc())
            .limit(query.limit)
            .offset(query.offset)
            .options(raiseload(Feedback.comments), raiseload(Feedback.votes))
        )
        result = await db.execute(stmt)
        items = list(result.scalars().all())

        return items, total

    @staticmethod
    async def related_counts(
        db: AsyncSession, feedback_ids: list[int]
    ) -> dict[int, tuple[int, int]]:
        """Comment and vote counts per feedback id, without loading the rows."""
        if not feedback_ids:
            return {}

        comments = await db.execute(
            select(Comment.feedback_id, func.count(Comment.id))
            .where(Comment.feedback_id.in_(feedback_ids))
            .group_by(Comment.feedback_id)
        )
        votes = await db.execute(
            select(Vote.feedback_id, func.count(Vote.id))
            .where(Vote.feedback_id.in_(feedback_ids))
            .group_by(Vote.feedback_id)
        )
        comment_counts = dict(comments.all())
        vote_counts = dict(votes.all())
        return {
            fid: (comment_counts.get(fid, 0), vote_counts.get(fid, 0))
            for fid in feedback_ids
        }

    @staticmethod
    async def get_detail(db: AsyncSession, feedback_id: int, viewer: User) -> Feedback:
        """Fetch one feedback for ``viewer`` and count the view.

        Students only see their own feedback; anything else is reported as
        not found.
        """
        conditions = [Feedback.id == feedback_id]
        if not is_allowed(viewer.role, Operation.VIEW_ANY_FEEDBACK):
            conditions.append(Feedback.user_id == viewer.id)

        result = await db.execute(select(Feedback.id).where(*conditions))
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Feedback not found")

        await db.execute(
            update(Feedback)
            .where(Feedback.id == feedback_id)
            .values(views=Feedback.views + 1)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        return await FeedbackService.load(db, feedback_id)

    @staticmethod
    async def stats(db: AsyncSession, user_id: int) -> dict[str, int]:
        """Count the user's feedback per status plus unread notifications."""
        result = await db.execute(
            select(Feedback.status, func.count(Feedback.id))
            .where(Feedback.user_id == user_id)
            .group_by(Feedback.status)
        )
        counts = {key: 0 for key in _STATUS_KEYS.values()}
        total = 0
        for status, count in result.all():
            counts[_STATUS_KEYS[status]] = count
            total += count

        unread = (
            await db.execute(
                select(func.count(Notification.id)).where(
                    Notification.user_id == user_id,
                    Notification.is_read.is_(False),
                )
            )
        ).scalar() or 0

        return {"total": total, **counts, "unread_notifications": unread}

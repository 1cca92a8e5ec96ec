from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.core.exceptions import NotFoundError
from campus_voice.models.notification import Notification


class NotificationService:
    @staticmethod
    async def list_for_user(
        db: AsyncSession, user_id: int, unread_only: bool = False, limit: int = 50
    ) -> tuple[list[Notification], int]:
        """Return the user's newest notifications and their unread count."""
        conditions = [Notification.user_id == user_id]
        if unread_only:
            conditions.append(Notification.is_read.is_(False))

        result = await db.execute(
            select(Notification)
            .where(*conditions)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        unread = (
            await db.execute(
                select(func.count(Notification.id)).where(
                    Notification.user_id == user_id,
                    Notification.is_read.is_(False),
                )
            )
        ).scalar() or 0
        return list(result.scalars().all()), unread

    @staticmethod
    async def mark_read(db: AsyncSession, notification_id: int, user_id: int) -> Notification:
        result = await db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError("Notification not found")

        notification.is_read = True
        await db.commit()
        await db.refresh(notification)
        return notification

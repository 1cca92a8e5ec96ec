from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.api.deps import require_operation
from campus_voice.core.permissions import Operation
from campus_voice.database import get_db
from campus_voice.models.user import User
from campus_voice.schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
)
from campus_voice.services.notification import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/", response_model=NotificationListResponse)
async def list_notifications(
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    limit: int = Query(default=50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_operation(Operation.READ_NOTIFICATIONS)),
):
    """The caller's notifications, newest first."""
    notifications, unread = await NotificationService.list_for_user(
        db, current_user.id, unread_only=unread_only, limit=limit
    )
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread=unread,
    )


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_operation(Operation.READ_NOTIFICATIONS)),
):
    return await NotificationService.mark_read(db, notification_id, current_user.id)

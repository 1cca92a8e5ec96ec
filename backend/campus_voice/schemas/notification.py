from datetime import datetime

from campus_voice.models.notification import NotificationType
from campus_voice.schemas.base import CamelModel


class NotificationResponse(CamelModel):
    id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    related_id: int | None
    is_read: bool
    created_at: datetime


class NotificationListResponse(CamelModel):
    notifications: list[NotificationResponse]
    unread: int

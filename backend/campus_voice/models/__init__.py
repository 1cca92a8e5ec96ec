from campus_voice.models.user import User, UserRole
from campus_voice.models.category import Category
from campus_voice.models.feedback import Feedback, FeedbackPriority, FeedbackStatus
from campus_voice.models.comment import Comment
from campus_voice.models.vote import Vote, VoteType
from campus_voice.models.notification import Notification, NotificationType
from campus_voice.models.activity_log import ActivityLog

__all__ = [
    "User",
    "UserRole",
    "Category",
    "Feedback",
    "FeedbackPriority",
    "FeedbackStatus",
    "Comment",
    "Vote",
    "VoteType",
    "Notification",
    "NotificationType",
    "ActivityLog",
]

from campus_voice.schemas.base import CamelModel


class DashboardStatsResponse(CamelModel):
    total: int = 0
    pending: int = 0
    under_review: int = 0
    in_progress: int = 0
    resolved: int = 0
    rejected: int = 0
    unread_notifications: int = 0

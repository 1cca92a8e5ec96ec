from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.api.deps import require_operation
from campus_voice.core.permissions import Operation
from campus_voice.database import get_db
from campus_voice.models.user import User
from campus_voice.schemas.dashboard import DashboardStatsResponse
from campus_voice.services.feedback import FeedbackService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_operation(Operation.VIEW_STATS)),
):
    """Counts of the caller's feedback by status, plus unread notifications."""
    stats = await FeedbackService.stats(db, current_user.id)
    return DashboardStatsResponse(**stats)

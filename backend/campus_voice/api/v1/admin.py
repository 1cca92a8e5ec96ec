from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.api.deps import get_client_info, require_operation
from campus_voice.api.v1.feedback import to_list_response
from campus_voice.config import get_settings
from campus_voice.core.permissions import Operation
from campus_voice.database import get_db
from campus_voice.models.feedback import FeedbackPriority, FeedbackStatus
from campus_voice.models.user import User
from campus_voice.schemas.feedback import (
    FeedbackListResponse,
    FeedbackQuery,
    FeedbackResponse,
    FeedbackStatusUpdateRequest,
)
from campus_voice.services.activity import ClientInfo
from campus_voice.services.feedback import FeedbackService
from campus_voice.services.lifecycle import FeedbackLifecycleService

router = APIRouter(prefix="/admin", tags=["Admin"])
settings = get_settings()


@router.get("/feedback", response_model=FeedbackListResponse)
async def list_all_feedback(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    status: FeedbackStatus | None = None,
    priority: FeedbackPriority | None = None,
    category_id: int | None = Query(default=None, alias="categoryId"),
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_operation(Operation.LIST_ALL_FEEDBACK)),
):
    """List feedback from every user. Admin only."""
    query = FeedbackQuery(
        status=status,
        priority=priority,
        category_id=category_id,
        page=page,
        limit=limit,
    )
    items, total = await FeedbackService.list_feedback(db, query)
    return await to_list_response(db, items, total, query)


@router.put("/feedback/{feedback_id}/status", response_model=FeedbackResponse)
async def update_feedback_status(
    feedback_id: int,
    body: FeedbackStatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    client: ClientInfo = Depends(get_client_info),
    admin: User = Depends(require_operation(Operation.TRANSITION_FEEDBACK)),
):
    """Move feedback to a new status and notify its owner. Admin only."""
    return await FeedbackLifecycleService.transition(
        db=db,
        feedback_id=feedback_id,
        status=body.status,
        admin_response=body.admin_response,
        actor_id=admin.id,
        client=client,
    )

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.api.deps import get_client_info, require_operation
from campus_voice.config import get_settings
from campus_voice.core.permissions import Operation
from campus_voice.database import get_db
from campus_voice.models.feedback import Feedback, FeedbackPriority, FeedbackStatus
from campus_voice.models.user import User
from campus_voice.schemas.feedback import (
    FeedbackCreateRequest,
    FeedbackDetailResponse,
    FeedbackListResponse,
    FeedbackQuery,
    FeedbackResponse,
    FeedbackSummaryResponse,
    PaginationResponse,
    pagination_pages,
)
from campus_voice.services.activity import ClientInfo
from campus_voice.services.attachments import AttachmentStorage
from campus_voice.services.feedback import FeedbackService

router = APIRouter(prefix="/feedback", tags=["Feedback"])
settings = get_settings()


def _to_summary(fb: Feedback, counts: tuple[int, int]) -> FeedbackSummaryResponse:
    data = FeedbackSummaryResponse.model_validate(fb)
    data.comment_count, data.vote_count = counts
    return data


async def to_list_response(
    db: AsyncSession, items: list[Feedback], total: int, query: FeedbackQuery
) -> FeedbackListResponse:
    counts = await FeedbackService.related_counts(db, [fb.id for fb in items])
    return FeedbackListResponse(
        feedback=[_to_summary(fb, counts[fb.id]) for fb in items],
        pagination=PaginationResponse(
            page=query.page,
            limit=query.limit,
            total=total,
            pages=pagination_pages(total, query.limit),
        ),
    )


@router.post("/", response_model=FeedbackResponse, status_code=201)
async def submit_feedback(
    title: str = Form(min_length=1, max_length=200),
    description: str = Form(min_length=1),
    category_id: int = Form(alias="categoryId"),
    location: str | None = Form(default=None, max_length=200),
    priority: FeedbackPriority = Form(default=FeedbackPriority.MEDIUM),
    is_anonymous: bool = Form(default=False, alias="isAnonymous"),
    attachments: list[UploadFile | str] | None = File(default=None),
    db: AsyncSession = Depends(get_db),
    client: ClientInfo = Depends(get_client_info),
    current_user: User = Depends(require_operation(Operation.SUBMIT_FEEDBACK)),
):
    """Submit feedback with up to five attachments. New feedback always starts PENDING."""
    body = FeedbackCreateRequest(
        title=title,
        description=description,
        category_id=category_id,
        location=location,
        priority=priority,
        is_anonymous=is_anonymous,
    )
    # a form submitted without choosing a file sends an empty part, which
    # arrives as a string or as an upload with no filename
    uploads = [f for f in attachments or [] if not isinstance(f, str) and f.filename]
    storage = AttachmentStorage()
    stored = await storage.save_all(uploads)
    try:
        return await FeedbackService.submit(
            db=db,
            owner_id=current_user.id,
            data=body,
            attachments=stored,
            client=client,
        )
    except Exception:
        storage.discard(stored)
        raise


@router.get("/", response_model=FeedbackListResponse)
async def list_my_feedback(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    status: FeedbackStatus | None = None,
    category_id: int | None = Query(default=None, alias="categoryId"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_operation(Operation.LIST_OWN_FEEDBACK)),
):
    """List the caller's own feedback, newest first."""
    query = FeedbackQuery(
        owner_id=current_user.id,
        status=status,
        category_id=category_id,
        page=page,
        limit=limit,
    )
    items, total = await FeedbackService.list_feedback(db, query)
    return await to_list_response(db, items, total, query)


@router.get("/{feedback_id}", response_model=FeedbackDetailResponse)
async def get_feedback(
    feedback_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_operation(Operation.VIEW_FEEDBACK)),
):
    """Get one feedback with comments and votes. Each call counts as a view."""
    return await FeedbackService.get_detail(db, feedback_id, viewer=current_user)

import math
from datetime import datetime

from pydantic import ConfigDict, Field

from campus_voice.models.feedback import FeedbackPriority, FeedbackStatus
from campus_voice.models.user import UserRole
from campus_voice.models.vote import VoteType
from campus_voice.schemas.base import CamelModel
from campus_voice.schemas.category import CategoryResponse


def pagination_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


class FeedbackCreateRequest(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    category_id: int
    location: str | None = Field(default=None, max_length=200)
    priority: FeedbackPriority = FeedbackPriority.MEDIUM
    is_anonymous: bool = False


class FeedbackStatusUpdateRequest(CamelModel):
    status: FeedbackStatus
    admin_response: str | None = None


class FeedbackQuery(CamelModel):
    """Filter and page selection for a feedback listing."""

    model_config = ConfigDict(frozen=True)

    owner_id: int | None = None
    status: FeedbackStatus | None = None
    priority: FeedbackPriority | None = None
    category_id: int | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class FeedbackUserResponse(CamelModel):
    first_name: str
    last_name: str
    email: str


class CommentUserResponse(CamelModel):
    first_name: str
    last_name: str
    role: UserRole


class CommentResponse(CamelModel):
    id: int
    user_id: int
    content: str
    is_admin_response: bool
    created_at: datetime
    user: CommentUserResponse | None = None


class VoteUserResponse(CamelModel):
    first_name: str
    last_name: str


class VoteResponse(CamelModel):
    id: int
    user_id: int
    vote_type: VoteType
    created_at: datetime
    user: VoteUserResponse | None = None


class FeedbackResponse(CamelModel):
    id: int
    user_id: int
    category_id: int
    title: str
    description: str
    location: str | None
    priority: FeedbackPriority
    status: FeedbackStatus
    is_anonymous: bool
    attachments: list[str] | None
    views: int
    admin_response: str | None
    resolved_at: datetime | None
    created_at: datetime
    updated_at: datetime
    category: CategoryResponse | None = None
    user: FeedbackUserResponse | None = None


class FeedbackSummaryResponse(FeedbackResponse):
    comment_count: int = 0
    vote_count: int = 0


class FeedbackDetailResponse(FeedbackResponse):
    comments: list[CommentResponse] = []
    votes: list[VoteResponse] = []


class PaginationResponse(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class FeedbackListResponse(CamelModel):
    feedback: list[FeedbackSummaryResponse]
    pagination: PaginationResponse

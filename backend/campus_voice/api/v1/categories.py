from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.database import get_db
from campus_voice.schemas.category import CategoryListResponse, CategoryResponse
from campus_voice.services.category import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=CategoryListResponse)
async def list_categories(db: AsyncSession = Depends(get_db)):
    """List active categories by name. No login required."""
    categories = await CategoryService.list_active(db)
    return CategoryListResponse(
        categories=[CategoryResponse.model_validate(c) for c in categories]
    )

from campus_voice.schemas.base import CamelModel


class CategoryResponse(CamelModel):
    id: int
    name: str
    description: str | None
    icon: str | None
    color: str | None
    is_active: bool


class CategoryListResponse(CamelModel):
    categories: list[CategoryResponse]

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.models.category import Category

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Academic Issues", "Concerns related to courses, exams, and academic programs", "fa-graduation-cap", "#4361ee"),
    ("Infrastructure", "Issues with buildings, classrooms, and campus facilities", "fa-building", "#3f37c9"),
    ("Hostel & Accommodation", "Concerns about hostel facilities and accommodation", "fa-bed", "#4cc9f0"),
    ("Library Services", "Feedback about library resources and services", "fa-book", "#7209b7"),
    ("IT & Technology", "Issues with internet, computers, and technical services", "fa-laptop", "#f72585"),
    ("Food & Dining", "Feedback about cafeteria and food services", "fa-utensils", "#4caf50"),
    ("Sports & Recreation", "Concerns about sports facilities and recreational activities", "fa-futbol", "#ff9800"),
    ("Health Services", "Issues related to campus health center and medical services", "fa-heartbeat", "#f44336"),
    ("Transportation", "Feedback about campus transportation and parking", "fa-bus", "#9c27b0"),
    ("Safety & Security", "Concerns about campus safety and security measures", "fa-shield-alt", "#e91e63"),
    ("Administration", "Issues with administrative processes and services", "fa-user-tie", "#607d8b"),
    ("Other", "Other concerns not covered by above categories", "fa-ellipsis-h", "#795548"),
]


class CategoryService:
    @staticmethod
    async def list_active(db: AsyncSession) -> list[Category]:
        result = await db.execute(
            select(Category).where(Category.is_active.is_(True)).order_by(Category.name)
        )
        return list(result.scalars().all())

    @staticmethod
    async def seed_defaults(db: AsyncSession) -> int:
        """Create the default categories if the table is empty. Returns how many were added."""
        result = await db.execute(select(Category.id).limit(1))
        if result.scalar_one_or_none() is not None:
            return 0

        db.add_all(
            Category(name=name, description=description, icon=icon, color=color)
            for name, description, icon, color in DEFAULT_CATEGORIES
        )
        await db.commit()
        logger.info("Seeded %d default categories", len(DEFAULT_CATEGORIES))
        return len(DEFAULT_CATEGORIES)

"""
Test fixtures: a throwaway SQLite database per test, users of both roles,
the default categories and an HTTP client wired to the test database.
"""
import os

# must be set before campus_voice.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import campus_voice.models  # noqa: F401  registers tables on Base.metadata
from campus_voice.config import get_settings
from campus_voice.core.security import create_access_token, hash_password
from campus_voice.database import Base, get_db
from campus_voice.main import app
from campus_voice.models.feedback import Feedback, FeedbackPriority, FeedbackStatus
from campus_voice.models.user import User, UserRole
from campus_voice.services.category import CategoryService

TEST_PASSWORD = "secret123"


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(get_settings(), "UPLOAD_DIR", str(path))
    return path


@pytest_asyncio.fixture
async def client(session_factory, upload_dir) -> AsyncGenerator[AsyncClient, None]:
    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def make_user(
    db: AsyncSession,
    email: str,
    role: UserRole = UserRole.STUDENT,
    first_name: str = "Test",
    last_name: str = "User",
) -> User:
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_feedback(
    db: AsyncSession,
    user: User,
    category_id: int,
    title: str = "Broken projector",
    status: FeedbackStatus = FeedbackStatus.PENDING,
    priority: FeedbackPriority = FeedbackPriority.MEDIUM,
    created_at: datetime | None = None,
) -> Feedback:
    feedback = Feedback(
        user_id=user.id,
        category_id=category_id,
        title=title,
        description="Details for " + title,
        status=status,
        priority=priority,
    )
    if created_at is not None:
        feedback.created_at = created_at
    db.add(feedback)
    await db.commit()
    await db.refresh(feedback)
    return feedback


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}


def minutes_ago(minutes: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=minutes)


@pytest_asyncio.fixture
async def categories(db_session) -> int:
    return await CategoryService.seed_defaults(db_session)


@pytest_asyncio.fixture
async def student(db_session) -> User:
    return await make_user(db_session, "student@campusvoice.edu", first_name="John", last_name="Doe")


@pytest_asyncio.fixture
async def other_student(db_session) -> User:
    return await make_user(db_session, "jane@campusvoice.edu", first_name="Jane", last_name="Roe")


@pytest_asyncio.fixture
async def admin(db_session) -> User:
    return await make_user(
        db_session,
        "admin@campusvoice.edu",
        role=UserRole.ADMIN,
        first_name="System",
        last_name="Administrator",
    )

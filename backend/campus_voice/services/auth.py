import logging
from datetime import datetime, timezone

import jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.config import get_settings
from campus_voice.core.exceptions import BadRequestError, UnauthorizedError
from campus_voice.core.security import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from campus_voice.models.user import User
from campus_voice.schemas.auth import UserRegisterRequest
from campus_voice.services.activity import ActivityLogService, ClientInfo

logger = logging.getLogger(__name__)


def _issue_tokens(user: User) -> dict:
    settings = get_settings()
    return {
        "access_token": create_access_token(user.id, user.role.value),
        "refresh_token": create_refresh_token(user.id),
        "token_type": "bearer",
        "expires_in": settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


class AuthService:
    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def register(
        db: AsyncSession,
        data: UserRegisterRequest,
        client: ClientInfo | None = None,
    ) -> User:
        """Register a new student account."""
        email = data.email.lower()
        if await AuthService.get_by_email(db, email) is not None:
            raise BadRequestError("User already exists")

        user = User(
            first_name=data.first_name,
            last_name=data.last_name,
            email=email,
            password_hash=hash_password(data.password),
            phone=data.phone,
            department=data.department,
            year_of_study=data.year_of_study,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # a concurrent registration took the email after the lookup
            await db.rollback()
            raise BadRequestError("User already exists")
        ActivityLogService.record(db, user_id=user.id, action="register", client=client)
        await db.commit()
        await db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    @staticmethod
    async def login(
        db: AsyncSession,
        email: str,
        password: str,
        client: ClientInfo | None = None,
    ) -> dict:
        """Authenticate user and return tokens."""
        user = await AuthService.get_by_email(db, email)

        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")

        if not user.is_active:
            raise UnauthorizedError("Account is inactive")

        user.last_login = datetime.now(timezone.utc)
        ActivityLogService.record(db, user_id=user.id, action="login", client=client)
        await db.commit()

        return _issue_tokens(user)

    @staticmethod
    async def refresh_token(db: AsyncSession, refresh_token: str) -> dict:
        """Trade a refresh token for a new token pair."""
        try:
            user_id = decode_token(refresh_token, REFRESH_TOKEN)
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid or expired refresh token")
        return _issue_tokens(await AuthService.get_active_user(db, user_id))

    @staticmethod
    async def get_active_user(db: AsyncSession, user_id: int) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise UnauthorizedError("User not found")
        if not user.is_active:
            raise UnauthorizedError("User account is inactive")
        return user

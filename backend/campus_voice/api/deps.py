from collections.abc import Awaitable, Callable

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.core.exceptions import ForbiddenError, UnauthorizedError
from campus_voice.core.permissions import Operation, is_allowed
from campus_voice.core.security import ACCESS_TOKEN, decode_token
from campus_voice.database import get_db
from campus_voice.models.user import User
from campus_voice.services.activity import ClientInfo
from campus_voice.services.auth import AuthService

security_scheme = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active user."""
    try:
        user_id = decode_token(credentials.credentials, ACCESS_TOKEN)
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid or expired token")
    return await AuthService.get_active_user(db, user_id)


def require_operation(operation: Operation) -> Callable[..., Awaitable[User]]:
    """Dependency that admits the current user only if their role may run ``operation``."""

    async def _check(current_user: User = Depends(get_current_user)) -> User:
        if not is_allowed(current_user.role, operation):
            raise ForbiddenError("Admin access required")
        return current_user

    return _check


def get_client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )

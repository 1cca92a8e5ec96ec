from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from campus_voice.config import get_settings

settings = get_settings()

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
BCRYPT_MAX_BYTES = 72

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))


def _encode(user_id: int, token_type: str, lifetime: timedelta, **claims) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
        **claims,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: int, role: str) -> str:
    """Short-lived token sent as ``Authorization: Bearer``; carries the role."""
    return _encode(
        user_id,
        ACCESS_TOKEN,
        timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
        role=role,
    )


def create_refresh_token(user_id: int) -> str:
    return _encode(
        user_id, REFRESH_TOKEN, timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
    )


def decode_token(token: str, expected_type: str) -> int:
    """
    Verify ``token`` and return the user id it was issued for.

    Raises ``jwt.InvalidTokenError`` when the signature, expiry, type or
    subject is wrong.
    """
    payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if payload.get("type") != expected_type:
        raise jwt.InvalidTokenError(f"Expected a {expected_type} token")
    try:
        return int(payload["sub"])
    except (KeyError, ValueError):
        raise jwt.InvalidTokenError("Token subject is not a user id")

from datetime import datetime

from pydantic import EmailStr, Field

from campus_voice.models.user import UserRole
from campus_voice.schemas.base import CamelModel


class UserRegisterRequest(CamelModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    phone: str | None = Field(default=None, max_length=30)
    department: str | None = Field(default=None, max_length=150)
    year_of_study: int | None = Field(default=None, ge=1, le=10)


class UserLoginRequest(CamelModel):
    email: EmailStr
    password: str


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class RefreshTokenRequest(CamelModel):
    refresh_token: str


class UserResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None
    role: UserRole
    department: str | None
    year_of_study: int | None
    is_active: bool
    email_verified: bool
    last_login: datetime | None
    created_at: datetime

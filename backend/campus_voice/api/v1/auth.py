from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_voice.api.deps import get_client_info, get_current_user
from campus_voice.database import get_db
from campus_voice.models.user import User
from campus_voice.schemas.auth import (
    RefreshTokenRequest,
    TokenResponse,
    UserLoginRequest,
    UserRegisterRequest,
    UserResponse,
)
from campus_voice.services.activity import ClientInfo
from campus_voice.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    body: UserRegisterRequest,
    db: AsyncSession = Depends(get_db),
    client: ClientInfo = Depends(get_client_info),
):
    """Register a new student account."""
    return await AuthService.register(db=db, data=body, client=client)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: UserLoginRequest,
    db: AsyncSession = Depends(get_db),
    client: ClientInfo = Depends(get_client_info),
):
    """Login and receive JWT tokens."""
    return await AuthService.login(
        db=db, email=body.email, password=body.password, client=client
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    body: RefreshTokenRequest, db: AsyncSession = Depends(get_db)
):
    """Refresh the access token using a refresh token."""
    return await AuthService.refresh_token(db=db, refresh_token=body.refresh_token)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the current authenticated user's profile."""
    return current_user

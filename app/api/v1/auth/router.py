"""
Authentication API routes
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import RedisCache, get_cache
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.base import ApiResponse
from .schemas import (
    SignupRequest,
    LoginRequest,
    RefreshTokenRequest,
    AuthResponse,
    TokenResponse,
    UserResponse,
)
from .services import AuthService

router = APIRouter()

@router.post(
    "/signup",
    response_model=ApiResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register new user"
)
async def signup(
    request: SignupRequest,
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
):
    service = AuthService(db, cache)
    user = await service.signup(request)
    tokens = await service.generate_tokens(user)
    return ApiResponse(
        message="User created successfully",
        data=AuthResponse(user=UserResponse.model_validate(user), tokens=tokens)
    )

@router.post(
    "/login",
    response_model=ApiResponse[AuthResponse],
    summary="Login with email and password"
)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
):
    service = AuthService(db, cache)
    user = await service.login(request.email, request.password)
    tokens = await service.generate_tokens(user)
    return ApiResponse(
        message="Logged in successfully",
        data=AuthResponse(user=UserResponse.model_validate(user), tokens=tokens)
    )

@router.post(
    "/refresh",
    response_model=ApiResponse[TokenResponse],
    summary="Refresh access token"
)
async def refresh_token(
    request: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
):
    service = AuthService(db, cache)
    tokens = await service.refresh_tokens(request.refresh_token)
    return ApiResponse(message="Token refreshed successfully", data=tokens)

@router.post(
    "/logout",
    response_model=ApiResponse[None],
    summary="Logout and revoke refresh token"
)
async def logout(
    request: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
):
    await AuthService(db, cache).logout(request.refresh_token)
    return ApiResponse(message="Logged out successfully")

@router.get(
    "/profile",
    response_model=ApiResponse[UserResponse],
    summary="Get current user profile"
)
async def get_profile(current_user: User = Depends(get_current_user)):
    return ApiResponse(data=UserResponse.model_validate(current_user))

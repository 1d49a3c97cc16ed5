"""
Authentication service layer
Handles business logic for authentication
"""

from datetime import timedelta
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
import logging
import uuid

from app.models import User, UserRole
from app.core.security import REFRESH_TOKEN, SecurityUtils
from app.core.cache import RedisCache
from app.core.config import settings
from app.core.exceptions import UnauthorizedException, ConflictException
from .schemas import SignupRequest, TokenResponse

logger = logging.getLogger(__name__)

def refresh_token_key(user_id) -> str:
    return f"refresh_token:{user_id}"

class AuthService:
    """Authentication service

    The latest refresh token per user lives in the cache; logging out or
    logging in elsewhere invalidates older ones.
    """

    def __init__(self, db: AsyncSession, cache: RedisCache):
        self.db = db
        self.cache = cache

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def signup(self, request: SignupRequest) -> User:
        """
        Register a customer account

        Raises:
            ConflictException: Email already registered
        """
        if await self.get_user_by_email(request.email):
            raise ConflictException("User already exists", error_code="USER_EXISTS")

        user = User(
            full_name=request.full_name,
            email=request.email,
            password_hash=SecurityUtils.hash_password(request.password),
            role=UserRole.CUSTOMER,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictException("User already exists", error_code="USER_EXISTS")

        await self.db.refresh(user)
        logger.info(f"New user registered: {user.id}")
        return user

    async def login(self, email: str, password: str) -> User:
        user = await self.get_user_by_email(email)
        if not user or not SecurityUtils.verify_password(password, user.password_hash):
            raise UnauthorizedException("Invalid email or password")
        return user

    async def generate_tokens(self, user: User) -> TokenResponse:
        """
        Generate access and refresh tokens for user

        Args:
            user: User object

        Returns:
            TokenResponse with tokens
        """
        token_data = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role.value,
        }

        access_token = SecurityUtils.create_access_token(token_data)
        refresh_token = SecurityUtils.create_refresh_token(token_data)

        await self.cache.set(
            refresh_token_key(user.id),
            refresh_token,
            expire=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        )

        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        )

    async def refresh_tokens(self, refresh_token: str) -> TokenResponse:
        """
        Issue new tokens from a refresh token

        Raises:
            UnauthorizedException: Token invalid, revoked or superseded
        """
        payload = SecurityUtils.decode_token(refresh_token)
        if payload.get("type") != REFRESH_TOKEN:
            raise UnauthorizedException("Invalid token type")

        try:
            user_id = uuid.UUID(payload.get("sub", ""))
        except ValueError:
            raise UnauthorizedException("Invalid refresh token")

        stored = await self.cache.get(refresh_token_key(user_id))
        if stored != refresh_token:
            raise UnauthorizedException("Invalid refresh token")

        user = await self.db.get(User, user_id)
        if user is None:
            raise UnauthorizedException("User not found")

        return await self.generate_tokens(user)

    async def logout(self, refresh_token: Optional[str]) -> None:
        """Revoke the stored refresh token; unknown tokens are ignored"""
        if not refresh_token:
            return
        try:
            payload = SecurityUtils.decode_token(refresh_token)
        except UnauthorizedException:
            return
        await self.cache.delete(refresh_token_key(payload.get("sub")))

"""
Authentication plumbing: bcrypt passwords, JWT access/refresh tokens and
the FastAPI dependencies that resolve the calling user
"""

from datetime import timedelta
from typing import Optional, Dict, Any
import uuid
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .database import get_db
from .exceptions import UnauthorizedException, ForbiddenException
from app.models.user import User, UserRole
from app.utils.helpers import utcnow

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

def _encode(claims: Dict[str, Any], token_type: str, lifetime: timedelta) -> str:
    payload = {**claims, "type": token_type, "exp": utcnow() + lifetime}
    if token_type == REFRESH_TOKEN:
        # Distinct jti so a rotated token never equals its predecessor
        payload["jti"] = uuid.uuid4().hex
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

class SecurityUtils:
    """Password and token helpers"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def create_access_token(data: Dict[str, Any]) -> str:
        return _encode(data, ACCESS_TOKEN, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    @staticmethod
    def create_refresh_token(data: Dict[str, Any]) -> str:
        return _encode(data, REFRESH_TOKEN, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """Decode a token, raising 401 on a bad signature or expiry"""
        try:
            return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            raise UnauthorizedException("Invalid authentication credentials")

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Resolve the authenticated user from the bearer access token"""
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    payload = SecurityUtils.decode_token(credentials.credentials)
    if payload.get("type") != ACCESS_TOKEN:
        raise UnauthorizedException("Invalid token type")

    try:
        user_id = uuid.UUID(payload.get("sub", ""))
    except ValueError:
        raise UnauthorizedException("Invalid authentication credentials")

    user = await db.get(User, user_id)
    if user is None:
        raise UnauthorizedException("User not found")
    return user

async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.ADMIN:
        raise ForbiddenException("Admin access required")
    return current_user

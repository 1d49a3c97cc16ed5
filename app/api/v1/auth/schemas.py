"""
Authentication schemas for request/response validation
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
import uuid

from app.models.user import UserRole
from app.utils.validators import normalize_text, validate_email_address, validate_password

class SignupRequest(BaseModel):
    """New account registration"""
    full_name: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., max_length=255)
    password: str = Field(..., description="At least 6 characters")

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("Full name is required")
        return v

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return validate_email_address(v)

    @field_validator('password')
    @classmethod
    def check_password(cls, v):
        return validate_password(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "full_name": "Jane Doe",
                "email": "jane@example.com",
                "password": "secret123"
            }
        }
    }

class LoginRequest(BaseModel):
    """User login request"""
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

class RefreshTokenRequest(BaseModel):
    """Token refresh request"""
    refresh_token: str = Field(..., description="JWT refresh token")

class TokenResponse(BaseModel):
    """JWT token response"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token expiry in seconds")

class UserResponse(BaseModel):
    """User information response"""
    id: uuid.UUID
    full_name: str
    email: str
    role: UserRole
    created_at: datetime

    model_config = {
        "from_attributes": True
    }

class AuthResponse(BaseModel):
    """Authentication response with tokens and user info"""
    user: UserResponse
    tokens: TokenResponse

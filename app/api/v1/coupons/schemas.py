"""
Coupon schemas for request/response validation
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid

from app.utils.validators import validate_coupon_code, validate_coupon_prefix

class CouponBase(BaseModel):
    discount_percentage: Decimal = Field(..., ge=0, le=100)
    expiration_date: datetime
    usage_limit: Optional[int] = Field(None, ge=1, description="Omit for unlimited uses")
    minimum_purchase: Decimal = Field(Decimal("0"), ge=0)

class CouponCreate(CouponBase):
    """Admin request to create a coupon for one user"""
    code: str
    user_id: uuid.UUID

    @field_validator('code')
    @classmethod
    def canonicalize_code(cls, v):
        return validate_coupon_code(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "code": "SAVE20",
                "user_id": "123e4567-e89b-12d3-a456-426614174000",
                "discount_percentage": 20,
                "expiration_date": "2030-01-01T00:00:00Z",
                "usage_limit": 1,
                "minimum_purchase": 0
            }
        }
    }

class BulkCouponCreate(CouponBase):
    """Admin request to create one coupon per user"""
    user_ids: List[uuid.UUID] = Field(..., min_length=1, max_length=1000)
    code_prefix: str = "PROMO"

    @field_validator('code_prefix')
    @classmethod
    def canonicalize_prefix(cls, v):
        return validate_coupon_prefix(v)

class CouponValidateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    cart_total: Decimal = Field(..., ge=0)

class CouponValidationResponse(BaseModel):
    valid: bool
    message: str
    reason: Optional[str] = None
    code: Optional[str] = None
    discount_percentage: Optional[Decimal] = None
    discount_amount: Decimal = Decimal("0.00")

class CouponResponse(BaseModel):
    id: uuid.UUID
    code: str
    user_id: uuid.UUID
    discount_percentage: Decimal
    expiration_date: datetime
    is_active: bool
    usage_limit: Optional[int]
    used_count: int
    remaining_uses: Optional[int]
    minimum_purchase: Decimal
    created_at: datetime

    model_config = {
        "from_attributes": True
    }

class BulkCouponResponse(BaseModel):
    created: int
    requested: int
    coupons: List[CouponResponse]

class CleanupResponse(BaseModel):
    deactivated: int

"""
Checkout schemas for request/response validation
"""

from pydantic import BaseModel, Field, AliasChoices
from typing import Optional, List
from decimal import Decimal
import uuid

class CheckoutProduct(BaseModel):
    """Cart line as the client sees it; only id and quantity are trusted"""
    product_id: uuid.UUID = Field(..., validation_alias=AliasChoices("product_id", "id", "_id"))
    quantity: int = Field(1, ge=1, le=1000)
    name: Optional[str] = None
    price: Optional[Decimal] = None
    image: Optional[str] = None

class CheckoutSessionRequest(BaseModel):
    products: List[CheckoutProduct] = Field(..., description="At least one product")
    coupon_code: Optional[str] = Field(None, max_length=50, validation_alias=AliasChoices("coupon_code", "couponCode"))

class CheckoutSessionResponse(BaseModel):
    session_id: Optional[str]
    url: Optional[str]
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    order_id: Optional[uuid.UUID] = None

class CheckoutSuccessRequest(BaseModel):
    session_id: str = Field(..., min_length=1, max_length=255, validation_alias=AliasChoices("session_id", "sessionId"))

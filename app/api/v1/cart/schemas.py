"""
Cart schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import List
from decimal import Decimal
import uuid

from app.api.v1.products.schemas import ProductResponse

class CartItemCreate(BaseModel):
    """Schema for adding item to cart"""
    product_id: uuid.UUID
    quantity: int = Field(1, gt=0, le=1000)

class CartItemUpdate(BaseModel):
    """Schema for updating cart item; zero removes the item"""
    quantity: int = Field(..., ge=0, le=1000)

class CartItemResponse(BaseModel):
    """Schema for cart item response"""
    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    product: ProductResponse

    model_config = {
        "from_attributes": True
    }

class CartResponse(BaseModel):
    """Schema for complete cart response"""
    items: List[CartItemResponse]
    total_items: int
    subtotal: Decimal
    tax: Decimal
    total: Decimal

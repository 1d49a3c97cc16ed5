"""
Product schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
import uuid

from app.models.product import ProductCategory

class ProductCreate(BaseModel):
    """Admin request to create a product"""
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=5000)
    price: Decimal = Field(..., ge=0, le=1000000)
    category: ProductCategory
    stock: int = Field(0, ge=0)
    image: Optional[str] = Field(None, description="Base64 data URI or image URL")
    is_featured: bool = False

class ProductUpdate(BaseModel):
    """Partial product update; a new image replaces the old one"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    price: Optional[Decimal] = Field(None, ge=0, le=1000000)
    category: Optional[ProductCategory] = None
    stock: Optional[int] = Field(None, ge=0)
    image: Optional[str] = None
    is_featured: Optional[bool] = None

class ProductResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str
    price: Decimal
    category: ProductCategory
    stock: int
    image: str
    is_featured: bool
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }

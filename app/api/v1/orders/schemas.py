"""
Order schemas for request/response validation
"""

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid

from app.models.order import OrderStatus

class OrderItemResponse(BaseModel):
    """Frozen line of a completed order"""
    id: uuid.UUID
    product_id: Optional[uuid.UUID]
    product_name: Optional[str]
    quantity: int
    price: Decimal

    model_config = {
        "from_attributes": True
    }

class OrderResponse(BaseModel):
    """Schema for order response"""
    id: uuid.UUID
    user_id: uuid.UUID
    status: OrderStatus
    items: List[OrderItemResponse]
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    coupon_code: Optional[str]
    payment_session_id: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True
    }

class OrderStatusUpdate(BaseModel):
    """Admin status change"""
    status: OrderStatus

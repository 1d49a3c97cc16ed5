"""
Order API routes
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.core.database import get_db
from app.core.security import get_current_user, require_admin
from app.models.order import OrderStatus
from app.models.user import User
from app.schemas.base import ApiResponse, Page
from app.services.order_service import OrderService
from app.utils.pagination import PaginationParams, get_pagination_params
from .schemas import OrderResponse, OrderStatusUpdate

router = APIRouter()

@router.get(
    "",
    response_model=ApiResponse[List[OrderResponse]],
    summary="List the current user's orders"
)
async def get_my_orders(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    orders = await OrderService(db).get_user_orders(current_user.id)
    return ApiResponse(data=[OrderResponse.model_validate(order) for order in orders])

@router.get(
    "/admin/all",
    response_model=ApiResponse[Page[OrderResponse]],
    summary="List all orders"
)
async def get_all_orders(
    status: Optional[OrderStatus] = Query(None),
    params: PaginationParams = Depends(get_pagination_params),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    page = await OrderService(db).get_all_orders(params, status=status)
    page["items"] = [OrderResponse.model_validate(order) for order in page["items"]]
    return ApiResponse(data=page)

@router.get(
    "/{order_id}",
    response_model=ApiResponse[OrderResponse],
    summary="Get one of the current user's orders"
)
async def get_order(
    order_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).get_user_order(order_id, current_user.id)
    return ApiResponse(data=OrderResponse.model_validate(order))

@router.patch(
    "/{order_id}/status",
    response_model=ApiResponse[OrderResponse],
    summary="Update order status"
)
async def update_order_status(
    order_id: uuid.UUID,
    request: OrderStatusUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    order = await OrderService(db).update_order_status(order_id, request.status)
    return ApiResponse(message="Order status updated", data=OrderResponse.model_validate(order))

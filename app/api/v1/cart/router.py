"""
Cart API routes
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.base import ApiResponse
from app.services.cart_service import CartService
from .schemas import CartItemCreate, CartItemUpdate, CartResponse

router = APIRouter()

@router.get("", response_model=ApiResponse[CartResponse], summary="Get cart")
async def get_cart(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    cart = await CartService(db).get_cart(current_user.id)
    return ApiResponse(data=CartResponse.model_validate(cart, from_attributes=True))

@router.post(
    "",
    response_model=ApiResponse[CartResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add item to cart"
)
async def add_to_cart(
    request: CartItemCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    cart = await CartService(db).add_to_cart(current_user.id, request.product_id, request.quantity)
    return ApiResponse(message="Item added to cart", data=CartResponse.model_validate(cart, from_attributes=True))

@router.put("/{product_id}", response_model=ApiResponse[CartResponse], summary="Update item quantity")
async def update_quantity(
    product_id: uuid.UUID,
    request: CartItemUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    cart = await CartService(db).update_quantity(current_user.id, product_id, request.quantity)
    return ApiResponse(data=CartResponse.model_validate(cart, from_attributes=True))

@router.delete("/{product_id}", response_model=ApiResponse[CartResponse], summary="Remove item from cart")
async def remove_from_cart(
    product_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    cart = await CartService(db).remove_from_cart(current_user.id, product_id)
    return ApiResponse(message="Item removed from cart", data=CartResponse.model_validate(cart, from_attributes=True))

@router.delete("", response_model=ApiResponse[None], summary="Clear cart")
async def clear_cart(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await CartService(db).clear_cart(current_user.id)
    return ApiResponse(message="Cart cleared")

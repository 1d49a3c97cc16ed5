"""
Checkout and payment API routes
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_user
from app.models.user import User
from app.schemas.base import ApiResponse
from app.services.checkout_service import CheckoutRequestItem, CheckoutService
from app.services.payment_gateway import RazorpayGateway, get_payment_gateway
from app.api.v1.orders.schemas import OrderResponse
from .schemas import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    CheckoutSuccessRequest,
)

router = APIRouter()

@router.post(
    "/create-checkout-session",
    response_model=ApiResponse[CheckoutSessionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a hosted checkout session",
    description="Prices the cart from the catalog, applies the coupon and opens a payment link"
)
async def create_checkout_session(
    request: CheckoutSessionRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_payment_gateway)
):
    service = CheckoutService(db, gateway)
    result = await service.create_checkout_session(
        user_id=current_user.id,
        items=[
            CheckoutRequestItem(product_id=product.product_id, quantity=product.quantity)
            for product in request.products
        ],
        coupon_code=request.coupon_code,
    )
    return ApiResponse(
        data=CheckoutSessionResponse(
            session_id=result.session_id,
            url=result.url,
            subtotal=result.subtotal,
            discount_amount=result.discount_amount,
            tax_amount=result.tax_amount,
            total_amount=result.total_amount,
            order_id=result.order_id,
        )
    )

@router.post(
    "/checkout-success",
    response_model=ApiResponse[OrderResponse],
    summary="Complete a paid checkout",
    description="Creates the order for a paid session; repeated calls return the same order"
)
async def checkout_success(
    request: CheckoutSuccessRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_payment_gateway)
):
    order = await CheckoutService(db, gateway).complete_checkout(
        request.session_id, user_id=current_user.id
    )
    return ApiResponse(
        message="Payment successful, order created",
        data=OrderResponse.model_validate(order)
    )

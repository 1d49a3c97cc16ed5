"""
Coupon API routes
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.core.database import get_db
from app.core.security import get_current_user, require_admin
from app.models.user import User
from app.schemas.base import ApiResponse, Page
from app.services.coupon_service import CouponService
from app.utils.pagination import PaginationParams, get_pagination_params
from .schemas import (
    BulkCouponCreate,
    BulkCouponResponse,
    CleanupResponse,
    CouponCreate,
    CouponResponse,
    CouponValidateRequest,
    CouponValidationResponse,
)

router = APIRouter()

@router.get(
    "",
    response_model=ApiResponse[Optional[CouponResponse]],
    summary="Get the current user's usable coupon"
)
async def get_coupon(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    coupon = await CouponService(db).get_user_coupon(current_user.id)
    return ApiResponse(data=CouponResponse.model_validate(coupon) if coupon else None)

@router.get(
    "/mine",
    response_model=ApiResponse[List[CouponResponse]],
    summary="List all of the current user's coupons"
)
async def get_my_coupons(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    coupons = await CouponService(db).get_user_coupons(current_user.id)
    return ApiResponse(data=[CouponResponse.model_validate(c) for c in coupons])

@router.post(
    "/validate",
    response_model=ApiResponse[CouponValidationResponse],
    summary="Check a coupon against a cart total"
)
async def validate_coupon(
    request: CouponValidateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Validate without consuming a use; invalid coupons are a 200 with valid=false"""
    validation = await CouponService(db).validate_coupon(
        current_user.id, request.code, request.cart_total
    )
    return ApiResponse(
        message=validation.message,
        data=CouponValidationResponse(
            valid=validation.valid,
            message=validation.message,
            reason=validation.reason.value if validation.reason else None,
            code=validation.code,
            discount_percentage=validation.discount_percentage,
            discount_amount=validation.discount_amount,
        )
    )

# Admin routes

@router.get(
    "/admin",
    response_model=ApiResponse[Page[CouponResponse]],
    summary="List all coupons"
)
async def list_coupons(
    is_active: Optional[bool] = Query(None),
    params: PaginationParams = Depends(get_pagination_params),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    page = await CouponService(db).get_all_coupons(params, is_active=is_active)
    page["items"] = [CouponResponse.model_validate(c) for c in page["items"]]
    return ApiResponse(data=page)

@router.post(
    "/admin",
    response_model=ApiResponse[CouponResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a coupon"
)
async def create_coupon(
    request: CouponCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    coupon = await CouponService(db).create_coupon(
        code=request.code,
        user_id=request.user_id,
        discount_percentage=request.discount_percentage,
        expiration_date=request.expiration_date,
        usage_limit=request.usage_limit,
        minimum_purchase=request.minimum_purchase,
    )
    return ApiResponse(message="Coupon created successfully", data=CouponResponse.model_validate(coupon))

@router.post(
    "/admin/bulk",
    response_model=ApiResponse[BulkCouponResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create one coupon per user"
)
async def create_bulk_coupons(
    request: BulkCouponCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    coupons = await CouponService(db).create_bulk_coupons(
        user_ids=request.user_ids,
        discount_percentage=request.discount_percentage,
        expiration_date=request.expiration_date,
        code_prefix=request.code_prefix,
        usage_limit=request.usage_limit,
        minimum_purchase=request.minimum_purchase,
    )
    return ApiResponse(
        message=f"Created {len(coupons)} of {len(request.user_ids)} coupons",
        data=BulkCouponResponse(
            created=len(coupons),
            requested=len(request.user_ids),
            coupons=[CouponResponse.model_validate(c) for c in coupons],
        )
    )

@router.post(
    "/admin/cleanup",
    response_model=ApiResponse[CleanupResponse],
    summary="Deactivate expired coupons"
)
async def cleanup_expired_coupons(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    count = await CouponService(db).cleanup_expired_coupons()
    return ApiResponse(message=f"Deactivated {count} expired coupons", data=CleanupResponse(deactivated=count))

@router.patch(
    "/admin/{coupon_id}/deactivate",
    response_model=ApiResponse[CouponResponse],
    summary="Deactivate a coupon"
)
async def deactivate_coupon(
    coupon_id: uuid.UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    coupon = await CouponService(db).deactivate_coupon(coupon_id)
    return ApiResponse(message="Coupon deactivated", data=CouponResponse.model_validate(coupon))

@router.delete(
    "/admin/{coupon_id}",
    response_model=ApiResponse[None],
    summary="Delete a coupon"
)
async def delete_coupon(
    coupon_id: uuid.UUID,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await CouponService(db).delete_coupon(coupon_id)
    return ApiResponse(message="Coupon deleted")

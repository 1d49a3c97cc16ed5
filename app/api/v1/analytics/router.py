"""Analytics API routes (admin only)"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import date

from app.core.cache import RedisCache, get_cache
from app.core.database import get_db
from app.core.security import require_admin
from app.models.user import User
from app.schemas.base import ApiResponse
from .schemas import (
    AnalyticsOverview,
    CacheClearResult,
    CategoryRevenue,
    DailySales,
    OverviewStats,
    TopProduct,
)
from .services import AnalyticsService, resolve_date_range

router = APIRouter()

@router.get(
    "",
    response_model=ApiResponse[AnalyticsOverview],
    summary="Get analytics dashboard"
)
async def get_analytics(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    days: int = Query(7, ge=1, le=365),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
):
    """Overview, daily sales, top products and category revenue for a range"""
    start, end = resolve_date_range(start_date, end_date, days)
    data = await AnalyticsService(db, cache).get_analytics_overview(start, end)
    return ApiResponse(data=AnalyticsOverview.model_validate(data))

@router.get(
    "/overview",
    response_model=ApiResponse[OverviewStats],
    summary="Get headline counts and revenue"
)
async def get_overview(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    data = await AnalyticsService(db).get_overview_data()
    return ApiResponse(data=OverviewStats.model_validate(data))

@router.get(
    "/sales",
    response_model=ApiResponse[List[DailySales]],
    summary="Get daily sales"
)
async def get_daily_sales(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    days: int = Query(7, ge=1, le=365),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    start, end = resolve_date_range(start_date, end_date, days)
    data = await AnalyticsService(db).get_daily_sales_data(start, end)
    return ApiResponse(data=data)

@router.get(
    "/top-products",
    response_model=ApiResponse[List[TopProduct]],
    summary="Get best selling products"
)
async def get_top_products(
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    data = await AnalyticsService(db).get_top_products(limit)
    return ApiResponse(data=data)

@router.get(
    "/revenue-by-category",
    response_model=ApiResponse[List[CategoryRevenue]],
    summary="Get revenue per category"
)
async def get_revenue_by_category(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    data = await AnalyticsService(db).get_revenue_by_category()
    return ApiResponse(data=data)

@router.delete(
    "/cache",
    response_model=ApiResponse[CacheClearResult],
    summary="Clear cached analytics"
)
async def clear_analytics_cache(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
):
    cleared = await AnalyticsService(db, cache).clear_cache()
    return ApiResponse(message="Analytics cache cleared", data=CacheClearResult(cleared=cleared))

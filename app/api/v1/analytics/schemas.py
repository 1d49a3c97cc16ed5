"""Analytics schemas"""

from pydantic import BaseModel
from typing import List, Dict, Optional
from datetime import date
import uuid

class DateRangeFilter(BaseModel):
    start_date: date
    end_date: date

class UserStats(BaseModel):
    total: int
    new_this_month: int
    active_last_30_days: int

class ProductStats(BaseModel):
    total: int
    featured: int
    out_of_stock: int

class OrderStats(BaseModel):
    total: int
    completed: int
    pending: int
    processing: int
    cancelled: int
    refunded: int

class RevenueStats(BaseModel):
    total: float
    this_month: float
    last_month: float
    growth_percentage: float

class CouponStats(BaseModel):
    active: int
    used: int
    total_discount: float

class OverviewStats(BaseModel):
    users: UserStats
    products: ProductStats
    orders: OrderStats
    revenue: RevenueStats
    coupons: CouponStats

class DailySales(BaseModel):
    date: date
    sales: int
    revenue: float

class TopProduct(BaseModel):
    product_id: uuid.UUID
    name: str
    image: Optional[str] = None
    price: float
    total_sold: int
    revenue: float

class CategoryRevenue(BaseModel):
    category: str
    revenue: float
    orders: int
    percentage: float

class AnalyticsOverview(BaseModel):
    date_range: DateRangeFilter
    overview: OverviewStats
    daily_sales: List[DailySales]
    top_products: List[TopProduct]
    revenue_by_category: List[CategoryRevenue]

class CacheClearResult(BaseModel):
    cleared: int
    details: Optional[Dict[str, int]] = None

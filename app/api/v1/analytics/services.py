"""Analytics service layer"""

from typing import List, Dict, Any, Optional, Tuple
from datetime import datetime, date, time, timedelta
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_, distinct
import pandas as pd
import logging

from app.models import Coupon, Order, OrderItem, OrderStatus, Product, User
from app.core.cache import RedisCache
from app.core.config import settings
from app.core.exceptions import ValidationException
from app.utils.helpers import round_money, start_of_month, start_of_previous_month, utcnow

logger = logging.getLogger(__name__)

OVERVIEW_CACHE_PREFIX = "analytics:overview"
MAX_RANGE_DAYS = 366

def resolve_date_range(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    days: int = 7
) -> Tuple[date, date]:
    """
    Normalize a reporting range to whole calendar days

    Without explicit bounds the range is the last `days` days ending today.
    A lone start_date runs to today; a lone end_date reaches back `days` days.
    """
    end = end_date or utcnow().date()
    start = start_date or end - timedelta(days=days - 1)
    if start > end:
        raise ValidationException("start_date must not be after end_date")
    if (end - start).days + 1 > MAX_RANGE_DAYS:
        raise ValidationException(f"Date range cannot exceed {MAX_RANGE_DAYS} days")
    return start, end

def _money(value: Any) -> float:
    return float(round_money(value if value is not None else Decimal("0")))

class AnalyticsService:
    """Read-only reporting over orders, products, users and coupons"""

    def __init__(self, db: AsyncSession, cache: Optional[RedisCache] = None):
        self.db = db
        self.cache = cache

    async def get_analytics_overview(self, start: date, end: date) -> Dict[str, Any]:
        """
        Full dashboard for a date range, cached per range

        Returns:
            JSON-ready dictionary: date_range, overview, daily_sales,
            top_products and revenue_by_category
        """
        cache_key = f"{OVERVIEW_CACHE_PREFIX}:{start.isoformat()}:{end.isoformat()}"
        if self.cache:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                return cached

        data = {
            "date_range": {"start_date": start.isoformat(), "end_date": end.isoformat()},
            "overview": await self.get_overview_data(),
            "daily_sales": await self.get_daily_sales_data(start, end),
            "top_products": await self.get_top_products(),
            "revenue_by_category": await self.get_revenue_by_category(),
        }

        if self.cache:
            await self.cache.set(cache_key, data, expire=settings.ANALYTICS_CACHE_TTL)
        return data

    async def get_overview_data(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or utcnow()
        month_start = start_of_month(now)
        last_month_start = start_of_previous_month(now)
        completed = Order.status == OrderStatus.COMPLETED

        users = {
            "total": await self.db.scalar(select(func.count(User.id))) or 0,
            "new_this_month": await self.db.scalar(
                select(func.count(User.id)).where(User.created_at >= month_start)
            ) or 0,
            "active_last_30_days": await self.db.scalar(
                select(func.count(distinct(Order.user_id))).where(Order.created_at >= now - timedelta(days=30))
            ) or 0,
        }

        products = {
            "total": await self.db.scalar(select(func.count(Product.id))) or 0,
            "featured": await self.db.scalar(
                select(func.count(Product.id)).where(Product.is_featured.is_(True))
            ) or 0,
            "out_of_stock": await self.db.scalar(
                select(func.count(Product.id)).where(Product.stock == 0)
            ) or 0,
        }

        status_rows = await self.db.execute(
            select(Order.status, func.count(Order.id)).group_by(Order.status)
        )
        by_status = {status.value: count for status, count in status_rows.all()}
        orders = {"total": sum(by_status.values())}
        orders.update({status.value: by_status.get(status.value, 0) for status in OrderStatus})

        total_revenue = await self.db.scalar(select(func.sum(Order.total_amount)).where(completed))
        this_month = await self.db.scalar(
            select(func.sum(Order.total_amount)).where(and_(completed, Order.created_at >= month_start))
        )
        last_month = await self.db.scalar(
            select(func.sum(Order.total_amount)).where(
                and_(
                    completed,
                    Order.created_at >= last_month_start,
                    Order.created_at < month_start
                )
            )
        )
        revenue = {
            "total": _money(total_revenue),
            "this_month": _money(this_month),
            "last_month": _money(last_month),
            "growth_percentage": self._calculate_growth(this_month, last_month),
        }

        coupons = {
            "active": await self.db.scalar(
                select(func.count(Coupon.id)).where(Coupon.is_active.is_(True))
            ) or 0,
            "used": await self.db.scalar(
                select(func.count(Coupon.id)).where(Coupon.used_count > 0)
            ) or 0,
            "total_discount": _money(
                await self.db.scalar(
                    select(func.sum(Order.discount_amount)).where(and_(completed, Order.discount_amount > 0))
                )
            ),
        }

        return {
            "users": users,
            "products": products,
            "orders": orders,
            "revenue": revenue,
            "coupons": coupons,
        }

    @staticmethod
    def _calculate_growth(current: Any, previous: Any) -> float:
        """Month-over-month growth in percent; 0 when there is no baseline"""
        current = round_money(current or 0)
        previous = round_money(previous or 0)
        if previous == 0:
            return 0.0
        return float(round_money((current - previous) / previous * 100))

    async def get_daily_sales_data(self, start: date, end: date) -> List[Dict[str, Any]]:
        """
        Completed sales per calendar day, inclusive of both ends

        Days without orders are present with zero sales and revenue.
        """
        day = func.date(Order.created_at).label("day")
        result = await self.db.execute(
            select(
                day,
                func.count(Order.id).label("sales"),
                func.sum(Order.total_amount).label("revenue")
            )
            .where(
                and_(
                    Order.status == OrderStatus.COMPLETED,
                    Order.created_at >= datetime.combine(start, time.min),
                    Order.created_at < datetime.combine(end + timedelta(days=1), time.min)
                )
            )
            .group_by(day)
        )

        # SQLite returns the day as text, PostgreSQL as a date
        frame = pd.DataFrame(
            [(str(row.day)[:10], int(row.sales), _money(row.revenue)) for row in result.all()],
            columns=["date", "sales", "revenue"],
        ).set_index("date")
        calendar = pd.date_range(start, end, freq="D").strftime("%Y-%m-%d")
        frame = frame.reindex(calendar, fill_value=0)

        return [
            {"date": day_key, "sales": int(row["sales"]), "revenue": round(float(row["revenue"]), 2)}
            for day_key, row in frame.iterrows()
        ]

    async def get_top_products(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Best sellers by units on completed orders"""
        units = func.sum(OrderItem.quantity).label("total_sold")
        revenue = func.sum(OrderItem.price * OrderItem.quantity).label("revenue")
        result = await self.db.execute(
            select(Product.id, Product.name, Product.image, Product.price, units, revenue)
            .select_from(OrderItem)
            .join(Order, Order.id == OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(Order.status == OrderStatus.COMPLETED)
            .group_by(Product.id, Product.name, Product.image, Product.price)
            .order_by(units.desc())
            .limit(limit)
        )
        return [
            {
                "product_id": str(row.id),
                "name": row.name,
                "image": row.image,
                "price": _money(row.price),
                "total_sold": int(row.total_sold or 0),
                "revenue": _money(row.revenue),
            }
            for row in result.all()
        ]

    async def get_revenue_by_category(self) -> List[Dict[str, Any]]:
        """Completed revenue per product category with its share of the total"""
        revenue = func.sum(OrderItem.price * OrderItem.quantity).label("revenue")
        result = await self.db.execute(
            select(Product.category, revenue, func.count(distinct(Order.id)).label("orders"))
            .select_from(OrderItem)
            .join(Order, Order.id == OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(Order.status == OrderStatus.COMPLETED)
            .group_by(Product.category)
            .order_by(revenue.desc())
        )
        rows = result.all()
        total = sum((round_money(row.revenue or 0) for row in rows), Decimal("0"))

        return [
            {
                "category": row.category.value,
                "revenue": _money(row.revenue),
                "orders": int(row.orders),
                "percentage": float(round_money(round_money(row.revenue or 0) / total * 100)) if total else 0.0,
            }
            for row in rows
        ]

    async def clear_cache(self) -> int:
        """Drop every cached analytics overview"""
        if not self.cache:
            return 0
        cleared = await self.cache.delete_pattern(f"{OVERVIEW_CACHE_PREFIX}:*")
        logger.info(f"Cleared {cleared} analytics cache entries")
        return cleared

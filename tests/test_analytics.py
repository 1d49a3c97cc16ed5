"""
Tests for the analytics reports.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from app.api.v1.analytics.services import AnalyticsService, resolve_date_range
from app.core.exceptions import ValidationException
from app.models import Order, OrderItem, OrderStatus, ProductCategory
from app.utils.helpers import utcnow


@pytest.fixture
def make_order(db_session):
    async def _make_order(user, total, created_at=None, status=OrderStatus.COMPLETED, items=()):
        order = Order(
            user_id=user.id,
            status=status,
            subtotal=Decimal(total),
            total_amount=Decimal(total),
            created_at=created_at or utcnow(),
            items=[
                OrderItem(product_id=product.id, product_name=product.name, quantity=quantity, price=product.price)
                for product, quantity in items
            ],
        )
        db_session.add(order)
        await db_session.commit()
        return order

    return _make_order


class TestResolveDateRange:
    def test_defaults_to_last_seven_days(self):
        start, end = resolve_date_range()

        assert end == utcnow().date()
        assert (end - start).days == 6

    def test_lone_start_runs_to_today(self):
        start, end = resolve_date_range(start_date=utcnow().date() - timedelta(days=2))

        assert end == utcnow().date()
        assert (end - start).days == 2

    def test_start_after_end_is_rejected(self):
        with pytest.raises(ValidationException):
            resolve_date_range(date(2026, 3, 5), date(2026, 3, 1))

    def test_overlong_range_is_rejected(self):
        with pytest.raises(ValidationException):
            resolve_date_range(date(2024, 1, 1), date(2026, 1, 1))


class TestDailySales:
    async def test_series_is_inclusive_and_zero_filled(self, db_session, make_user, make_order):
        user = await make_user()
        await make_order(user, "10.00", datetime(2026, 3, 1, 9, 30))
        await make_order(user, "20.00", datetime(2026, 3, 1, 23, 59))
        await make_order(user, "99.00", datetime(2026, 3, 2, 12, 0), status=OrderStatus.PENDING)
        await make_order(user, "5.00", datetime(2026, 3, 3, 0, 0))
        await make_order(user, "7.00", datetime(2026, 3, 4, 0, 0))

        series = await AnalyticsService(db_session).get_daily_sales_data(date(2026, 3, 1), date(2026, 3, 3))

        assert series == [
            {"date": "2026-03-01", "sales": 2, "revenue": 30.0},
            {"date": "2026-03-02", "sales": 0, "revenue": 0.0},
            {"date": "2026-03-03", "sales": 1, "revenue": 5.0},
        ]

    async def test_empty_range_is_all_zeros(self, db_session):
        series = await AnalyticsService(db_session).get_daily_sales_data(date(2026, 1, 30), date(2026, 2, 2))

        assert [point["date"] for point in series] == ["2026-01-30", "2026-01-31", "2026-02-01", "2026-02-02"]
        assert all(point["sales"] == 0 and point["revenue"] == 0 for point in series)


class TestOverview:
    def test_growth_without_baseline_is_zero(self):
        assert AnalyticsService._calculate_growth(Decimal("150"), None) == 0.0
        assert AnalyticsService._calculate_growth(Decimal("150"), Decimal("0")) == 0.0

    def test_growth_percentage(self):
        assert AnalyticsService._calculate_growth(Decimal("150"), Decimal("100")) == 50.0
        assert AnalyticsService._calculate_growth(Decimal("50"), Decimal("200")) == -75.0

    async def test_month_over_month_revenue(self, db_session, make_user, make_order, make_product):
        user = await make_user()
        await make_product(name="Lamp", stock=0, is_featured=True)
        await make_order(user, "150.00", datetime(2026, 3, 5))
        await make_order(user, "100.00", datetime(2026, 2, 10))
        await make_order(user, "40.00", datetime(2026, 3, 6), status=OrderStatus.CANCELLED)

        overview = await AnalyticsService(db_session).get_overview_data(now=datetime(2026, 3, 15, 12, 0))

        assert overview["revenue"] == {
            "total": 250.0,
            "this_month": 150.0,
            "last_month": 100.0,
            "growth_percentage": 50.0,
        }
        assert overview["orders"]["total"] == 3
        assert overview["orders"]["completed"] == 2
        assert overview["orders"]["cancelled"] == 1
        assert overview["products"] == {"total": 1, "featured": 1, "out_of_stock": 1}
        assert overview["users"]["total"] == 1


class TestProductReports:
    async def test_top_products_and_category_share(self, db_session, make_user, make_product, make_order):
        user = await make_user()
        speaker = await make_product(name="Speaker", price="10.00", category=ProductCategory.ELECTRONICS)
        novel = await make_product(name="Novel", price="10.00", category=ProductCategory.BOOKS)
        await make_order(user, "30.00", items=[(speaker, 3)])
        await make_order(user, "10.00", items=[(novel, 1)])
        await make_order(user, "50.00", status=OrderStatus.PENDING, items=[(novel, 5)])

        service = AnalyticsService(db_session)
        top = await service.get_top_products(limit=5)
        categories = await service.get_revenue_by_category()

        assert [(p["name"], p["total_sold"], p["revenue"]) for p in top] == [
            ("Speaker", 3, 30.0),
            ("Novel", 1, 10.0),
        ]
        assert categories == [
            {"category": "electronics", "revenue": 30.0, "orders": 1, "percentage": 75.0},
            {"category": "books", "revenue": 10.0, "orders": 1, "percentage": 25.0},
        ]


class TestOverviewCache:
    async def test_dashboard_is_cached_until_cleared(self, db_session, cache, make_user, make_order):
        user = await make_user()
        today = utcnow().date()
        await make_order(user, "20.00")
        service = AnalyticsService(db_session, cache)

        first = await service.get_analytics_overview(today, today)
        await make_order(user, "30.00")
        second = await service.get_analytics_overview(today, today)

        assert second == first
        assert first["daily_sales"] == [{"date": today.isoformat(), "sales": 1, "revenue": 20.0}]

        assert await service.clear_cache() == 1
        third = await service.get_analytics_overview(today, today)
        assert third["daily_sales"][0]["revenue"] == 50.0

    async def test_ranges_are_cached_separately(self, db_session, cache):
        service = AnalyticsService(db_session, cache)
        today = utcnow().date()

        await service.get_analytics_overview(today, today)
        await service.get_analytics_overview(today - timedelta(days=1), today)

        assert await service.clear_cache() == 2

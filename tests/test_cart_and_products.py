"""
Tests for cart and catalog services.
"""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.core.exceptions import NotFoundException, ValidationException
from app.models import CartItem, Order, OrderItem, OrderStatus, ProductCategory
from app.services.cart_service import CartService
from app.services.product_service import FEATURED_PRODUCTS_CACHE_KEY, ProductService
from app.utils.pagination import PaginationParams


class TestCart:
    async def test_adding_twice_merges_quantities(self, db_session, make_user, make_product):
        user = await make_user()
        product = await make_product(price="19.99")
        service = CartService(db_session)

        await service.add_to_cart(user.id, product.id, 1)
        cart = await service.add_to_cart(user.id, product.id, 2)

        assert len(cart["items"]) == 1
        assert cart["total_items"] == 3
        assert cart["subtotal"] == Decimal("59.97")
        assert cart["tax"] == Decimal("4.80")
        assert cart["total"] == Decimal("64.77")

    async def test_zero_quantity_removes_item(self, db_session, make_user, make_product):
        user = await make_user()
        product = await make_product()
        service = CartService(db_session)
        await service.add_to_cart(user.id, product.id)

        cart = await service.update_quantity(user.id, product.id, 0)

        assert cart["items"] == []
        assert cart["total"] == Decimal("0.00")

    async def test_unknown_product_cannot_be_added(self, db_session, make_user):
        user = await make_user()

        with pytest.raises(NotFoundException):
            await CartService(db_session).add_to_cart(user.id, uuid.uuid4())

    async def test_update_missing_item(self, db_session, make_user, make_product):
        user = await make_user()
        product = await make_product()

        with pytest.raises(NotFoundException):
            await CartService(db_session).update_quantity(user.id, product.id, 3)

    async def test_clear_only_touches_own_cart(self, db_session, make_user, make_product):
        alice = await make_user()
        bob = await make_user()
        product = await make_product()
        service = CartService(db_session)
        await service.add_to_cart(alice.id, product.id)
        await service.add_to_cart(bob.id, product.id)

        await service.clear_cart(alice.id)

        assert (await service.get_cart(alice.id))["items"] == []
        assert len((await service.get_cart(bob.id))["items"]) == 1


class TestProducts:
    async def test_list_filters_by_category_and_price(self, db_session, make_product):
        await make_product(name="Phone", price="300.00", category=ProductCategory.ELECTRONICS)
        await make_product(name="Cable", price="5.00", category=ProductCategory.ELECTRONICS)
        await make_product(name="Atlas", price="40.00", category=ProductCategory.BOOKS)

        page = await ProductService(db_session).list_products(
            PaginationParams(page=1, size=10),
            category=ProductCategory.ELECTRONICS,
            min_price=Decimal("10"),
        )

        assert [p.name for p in page["items"]] == ["Phone"]
        assert page["total"] == 1

    async def test_inverted_price_range_is_rejected(self, db_session):
        with pytest.raises(ValidationException):
            await ProductService(db_session).list_products(
                PaginationParams(page=1, size=10), min_price=Decimal("10"), max_price=Decimal("1")
            )

    async def test_create_sanitizes_text(self, db_session):
        product = await ProductService(db_session).create_product(
            name="  Desk   Lamp ",
            description="<p>Warm</p><script>alert(1)</script>",
            price=Decimal("35.00"),
            category=ProductCategory.HOME,
        )

        assert product.name == "Desk Lamp"
        assert "<script>" not in product.description

    async def test_toggle_featured_drops_cache(self, db_session, cache, make_product):
        product = await make_product(name="Chair")
        service = ProductService(db_session, cache)

        assert await service.get_featured_products() == []
        assert await cache.get(FEATURED_PRODUCTS_CACHE_KEY) == []

        await service.toggle_featured(product.id)

        assert await cache.get(FEATURED_PRODUCTS_CACHE_KEY) is None
        assert [p["name"] for p in await service.get_featured_products()] == ["Chair"]

    async def test_delete_keeps_order_history(self, db_session, make_user, make_product):
        user = await make_user()
        product = await make_product(name="Clock", price="12.00")
        product_id = product.id
        await CartService(db_session).add_to_cart(user.id, product_id)
        order = Order(
            user_id=user.id,
            status=OrderStatus.COMPLETED,
            subtotal=Decimal("12.00"),
            total_amount=Decimal("12.96"),
            items=[OrderItem(product_id=product_id, product_name="Clock", quantity=1, price=Decimal("12.00"))],
        )
        db_session.add(order)
        await db_session.commit()

        await ProductService(db_session).delete_product(product_id)

        item = await db_session.scalar(
            select(OrderItem).where(OrderItem.product_name == "Clock").execution_options(populate_existing=True)
        )
        assert item.product_id is None
        assert item.price == Decimal("12.00")
        assert await db_session.scalar(select(func.count(CartItem.id))) == 0
        with pytest.raises(NotFoundException):
            await ProductService(db_session).get_product(product_id)

"""
Checkout service
Prices carts, opens gateway sessions and turns paid sessions into orders
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence, Tuple
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.exceptions import (
    ForbiddenException,
    InternalServerException,
    PaymentIncompleteException,
    ValidationException,
)
from app.models.order import Order, OrderItem, OrderStatus
from app.models.product import Product
from app.services.cart_service import CartService
from app.services.checkout_metadata import (
    CheckoutLine,
    CheckoutMetadata,
    encode_checkout_metadata,
    decode_checkout_metadata,
)
from app.services.coupon_service import CouponService
from app.services.payment_gateway import LineItem, RazorpayGateway
from app.services.reward_service import RewardService
from app.utils.helpers import round_money, to_decimal

logger = logging.getLogger(__name__)


@dataclass
class CheckoutRequestItem:
    product_id: uuid.UUID
    quantity: int


@dataclass
class CheckoutSessionResult:
    session_id: Optional[str]
    url: Optional[str]
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    # Set when nothing was left to pay and the order was recorded directly
    order_id: Optional[uuid.UUID] = None


class CheckoutService:
    """Checkout flow from cart to order

    Product prices are always read from the database; client-sent prices
    are never trusted.
    """

    def __init__(
        self,
        db: AsyncSession,
        gateway: RazorpayGateway,
        coupon_service: Optional[CouponService] = None,
        reward_service: Optional[RewardService] = None
    ):
        self.db = db
        self.gateway = gateway
        self.coupon_service = coupon_service or CouponService(db)
        self.reward_service = reward_service or RewardService(db, self.coupon_service)
        self.tax_rate = to_decimal(settings.TAX_RATE)
        self.reward_threshold = to_decimal(settings.REWARD_THRESHOLD)

    async def create_checkout_session(
        self,
        user_id: uuid.UUID,
        items: Sequence[CheckoutRequestItem],
        coupon_code: Optional[str] = None
    ) -> CheckoutSessionResult:
        """
        Price a cart and open a hosted payment session

        Args:
            user_id: Purchasing user
            items: Product ids and quantities
            coupon_code: Optional coupon owned by the user

        Returns:
            Session id, hosted url and the computed amounts. A cart that
            costs nothing after its coupon skips the gateway; the order is
            recorded at once and its id returned without a session.

        Raises:
            ValidationException: Empty cart or unavailable products
            InvalidCouponException: Coupon rejected
        """
        if not items:
            raise ValidationException("Cart is empty")
        if len({item.product_id for item in items}) != len(items):
            raise ValidationException("Each product may appear only once in a checkout")
        if any(item.quantity < 1 for item in items):
            raise ValidationException("Quantity must be at least 1")

        result = await self.db.execute(
            select(Product).where(Product.id.in_([item.product_id for item in items]))
        )
        products = {product.id: product for product in result.scalars().all()}
        if len(products) != len(items):
            raise ValidationException("Some products are no longer available")

        lines = [
            CheckoutLine(
                product_id=item.product_id,
                quantity=item.quantity,
                price=products[item.product_id].price,
            )
            for item in items
        ]
        subtotal = sum((line.price * line.quantity for line in lines), Decimal("0"))

        discount = Decimal("0.00")
        if coupon_code:
            validation = await self.coupon_service.validate_coupon(user_id, coupon_code, subtotal)
            validation.raise_if_invalid()
            coupon_code = validation.code
            discount = validation.discount_amount

        taxable = subtotal - discount
        tax = round_money(taxable * self.tax_rate)
        total = round_money(taxable + tax)

        checkout = CheckoutMetadata(
            user_id=user_id,
            coupon_code=coupon_code,
            subtotal=round_money(subtotal),
            discount=discount,
            tax=tax,
            items=lines,
        )

        if total == 0:
            order = await self._place_free_order(checkout)
            return CheckoutSessionResult(
                session_id=None,
                url=None,
                subtotal=checkout.subtotal,
                discount_amount=discount,
                tax_amount=tax,
                total_amount=total,
                order_id=order.id,
            )

        line_items = [
            LineItem(name=products[line.product_id].name, unit_amount=line.price, quantity=line.quantity)
            for line in lines
        ]
        if discount > 0:
            line_items.append(LineItem(name=f"Coupon {coupon_code}", unit_amount=-discount))
        if tax > 0:
            line_items.append(LineItem(name="Sales tax", unit_amount=tax))

        session = await self.gateway.create_session(
            line_items,
            success_url=f"{settings.CLIENT_URL}/purchase-success",
            cancel_url=f"{settings.CLIENT_URL}/purchase-cancel",
            metadata=encode_checkout_metadata(checkout),
        )

        if total >= self.reward_threshold:
            await self.reward_service.issue_reward(user_id)

        return CheckoutSessionResult(
            session_id=session.id,
            url=session.url,
            subtotal=checkout.subtotal,
            discount_amount=discount,
            tax_amount=tax,
            total_amount=total,
        )

    async def get_order_by_session(self, session_id: str) -> Optional[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.payment_session_id == session_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _get_order(self, order_id: uuid.UUID) -> Order:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def complete_checkout(self, session_id: str, user_id: Optional[uuid.UUID] = None) -> Order:
        """
        Turn a paid gateway session into an order, exactly once

        Repeated or concurrent calls for the same session return the order
        created by the first call and repeat none of its side effects.
        Coupon redemption, reward issuance and cart clearing are best-effort.

        Args:
            session_id: Gateway session id
            user_id: When given, the session must belong to this user

        Raises:
            PaymentIncompleteException: Session not paid
            ForbiddenException: Session belongs to another user
        """
        session = await self.gateway.retrieve_session(session_id)
        if not session.is_paid:
            raise PaymentIncompleteException()

        existing = await self.get_order_by_session(session_id)
        if existing is not None:
            self._check_owner(existing.user_id, user_id)
            return existing

        checkout = decode_checkout_metadata(session.metadata)
        self._check_owner(checkout.user_id, user_id)

        order, created = await self._create_order(session_id, session.amount_total, checkout)
        if not created:
            return order

        logger.info(f"Created order {order.id} for session {session_id}")

        if checkout.coupon_code:
            await self._redeem_coupon(checkout.user_id, checkout.coupon_code)

        if session.amount_total >= self.reward_threshold:
            await self.reward_service.issue_reward(checkout.user_id)

        await self._clear_cart(checkout.user_id)

        return await self.get_order_by_session(session_id)

    @staticmethod
    def _check_owner(owner_id: uuid.UUID, user_id: Optional[uuid.UUID]) -> None:
        if user_id is not None and owner_id != user_id:
            raise ForbiddenException("Checkout session belongs to another user")

    async def _create_order(
        self,
        session_id: Optional[str],
        amount_paid: Decimal,
        checkout: CheckoutMetadata
    ) -> Tuple[Order, bool]:
        # Products deleted since the session opened keep their price snapshot without a reference
        result = await self.db.execute(
            select(Product).where(Product.id.in_([line.product_id for line in checkout.items]))
        )
        products = {product.id: product for product in result.scalars().all()}

        order = Order(
            user_id=checkout.user_id,
            status=OrderStatus.COMPLETED,
            subtotal=checkout.subtotal,
            tax_amount=checkout.tax,
            discount_amount=checkout.discount,
            total_amount=amount_paid,
            coupon_code=checkout.coupon_code,
            payment_session_id=session_id,
            items=[
                OrderItem(
                    product_id=line.product_id if line.product_id in products else None,
                    product_name=products[line.product_id].name if line.product_id in products else None,
                    quantity=line.quantity,
                    price=line.price,
                )
                for line in checkout.items
            ],
        )
        self.db.add(order)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            # Another request created it first
            existing = await self.get_order_by_session(session_id) if session_id else None
            if existing is None:
                raise InternalServerException("Could not record order")
            logger.info(f"Order for session {session_id} already exists")
            return existing, False
        return order, True

    async def _place_free_order(self, checkout: CheckoutMetadata) -> Order:
        """Record an order with nothing to pay

        The coupon is consumed before the order exists, so a single-use
        coupon raced by two requests yields one free order and one 400.
        """
        if checkout.coupon_code:
            await self.coupon_service.apply_coupon(checkout.user_id, checkout.coupon_code)

        order, _ = await self._create_order(None, Decimal("0.00"), checkout)
        order_id = order.id
        logger.info(f"Created order {order_id} without payment for user {checkout.user_id}")

        await self._clear_cart(checkout.user_id)
        return await self._get_order(order_id)

    async def _redeem_coupon(self, user_id: uuid.UUID, code: str) -> None:
        try:
            await self.coupon_service.apply_coupon(user_id, code)
        except Exception as e:
            logger.error(f"Could not redeem coupon {code} for user {user_id}: {str(e)}")
            await self.db.rollback()

    async def _clear_cart(self, user_id: uuid.UUID) -> None:
        try:
            await CartService(self.db).clear_cart(user_id)
        except Exception as e:
            logger.error(f"Could not clear cart for user {user_id}: {str(e)}")
            await self.db.rollback()

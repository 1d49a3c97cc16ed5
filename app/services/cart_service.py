"""
Cart service for managing cart operations
"""

from decimal import Decimal
from typing import List, Dict, Any, Optional
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_

from app.core.config import settings
from app.models.cart import CartItem
from app.models.product import Product
from app.core.exceptions import NotFoundException, ValidationException
from app.utils.helpers import round_money, to_decimal


class CartService:
    """
    Service for managing cart operations
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_cart_items(self, user_id: uuid.UUID) -> List[CartItem]:
        result = await self.db.execute(
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_cart(self, user_id: uuid.UUID) -> Dict[str, Any]:
        """
        Get the user's cart with totals

        Returns:
            Dictionary with items, total_items, subtotal, tax and total
        """
        items = await self.get_cart_items(user_id)
        subtotal = sum((item.product.price * item.quantity for item in items), Decimal("0"))
        tax = round_money(subtotal * to_decimal(settings.TAX_RATE))

        return {
            "items": items,
            "total_items": sum(item.quantity for item in items),
            "subtotal": round_money(subtotal),
            "tax": tax,
            "total": round_money(subtotal + tax),
        }

    async def _get_item(self, user_id: uuid.UUID, product_id: uuid.UUID) -> Optional[CartItem]:
        result = await self.db.execute(
            select(CartItem).where(
                and_(CartItem.user_id == user_id, CartItem.product_id == product_id)
            )
        )
        return result.scalar_one_or_none()

    async def add_to_cart(
        self,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int = 1
    ) -> Dict[str, Any]:
        """Add a product or bump its quantity if already in the cart"""
        if quantity < 1:
            raise ValidationException("Quantity must be at least 1")

        product = await self.db.get(Product, product_id)
        if product is None:
            raise NotFoundException("Product not found")

        existing_item = await self._get_item(user_id, product_id)
        if existing_item:
            existing_item.quantity += quantity
        else:
            self.db.add(CartItem(user_id=user_id, product_id=product_id, quantity=quantity))
        await self.db.commit()

        return await self.get_cart(user_id)

    async def update_quantity(
        self,
        user_id: uuid.UUID,
        product_id: uuid.UUID,
        quantity: int
    ) -> Dict[str, Any]:
        """Set an item's quantity; zero removes it"""
        if quantity < 0:
            raise ValidationException("Quantity cannot be negative")

        cart_item = await self._get_item(user_id, product_id)
        if cart_item is None:
            raise NotFoundException("Product not found in cart")

        if quantity == 0:
            await self.db.delete(cart_item)
        else:
            cart_item.quantity = quantity
        await self.db.commit()

        return await self.get_cart(user_id)

    async def remove_from_cart(self, user_id: uuid.UUID, product_id: uuid.UUID) -> Dict[str, Any]:
        await self.db.execute(
            delete(CartItem).where(
                and_(CartItem.user_id == user_id, CartItem.product_id == product_id)
            )
        )
        await self.db.commit()
        return await self.get_cart(user_id)

    async def clear_cart(self, user_id: uuid.UUID) -> None:
        await self.db.execute(delete(CartItem).where(CartItem.user_id == user_id))
        await self.db.commit()

"""
Order queries and admin status changes
"""

from typing import Any, Dict, List, Optional
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_

from app.core.exceptions import NotFoundException
from app.models.order import Order, OrderStatus
from app.utils.pagination import PaginationParams, paginate

logger = logging.getLogger(__name__)


class OrderService:
    """Service for reading orders and updating their status"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_orders(self, user_id: uuid.UUID) -> List[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_user_order(self, order_id: uuid.UUID, user_id: uuid.UUID) -> Order:
        """Fetch one of the user's orders; other users' orders read as missing"""
        result = await self.db.execute(
            select(Order).where(and_(Order.id == order_id, Order.user_id == user_id))
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise NotFoundException("Order not found")
        return order

    async def get_all_orders(
        self,
        params: PaginationParams,
        status: Optional[OrderStatus] = None
    ) -> Dict[str, Any]:
        query = select(Order).order_by(Order.created_at.desc())
        if status is not None:
            query = query.where(Order.status == status)
        return await paginate(self.db, query, params)

    async def update_order_status(self, order_id: uuid.UUID, status: OrderStatus) -> Order:
        order = await self.db.get(Order, order_id)
        if order is None:
            raise NotFoundException("Order not found")

        previous = order.status
        order.status = status
        await self.db.commit()
        await self.db.refresh(order)
        logger.info(f"Order {order_id} status changed from {previous.value} to {status.value}")
        return order

"""
Reward coupons for large purchases
"""

from datetime import timedelta
from typing import Optional
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_

from app.core.config import settings
from app.core.exceptions import ConflictException
from app.models.coupon import Coupon
from app.services.coupon_service import CouponService
from app.utils.helpers import generate_code, utcnow

logger = logging.getLogger(__name__)

CODE_ATTEMPTS = 3


class RewardService:
    """Issues one live reward coupon per user

    Issuance is best-effort: every failure is logged and reported as None
    so it can never break the purchase that triggered it.
    """

    def __init__(self, db: AsyncSession, coupon_service: Optional[CouponService] = None):
        self.db = db
        self.coupon_service = coupon_service or CouponService(db)

    async def has_live_reward(self, user_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            select(Coupon.id)
            .where(
                and_(
                    Coupon.user_id == user_id,
                    Coupon.code.startswith(settings.REWARD_CODE_PREFIX),
                    Coupon.is_active.is_(True),
                    Coupon.expiration_date > utcnow()
                )
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def issue_reward(self, user_id: uuid.UUID) -> Optional[Coupon]:
        """
        Create a reward coupon unless the user already holds a live one

        Returns:
            The new coupon, or None when skipped or failed
        """
        try:
            if await self.has_live_reward(user_id):
                logger.info(f"User {user_id} already holds a reward coupon")
                return None

            for _ in range(CODE_ATTEMPTS):
                try:
                    coupon = await self.coupon_service.create_coupon(
                        code=generate_code(settings.REWARD_CODE_PREFIX),
                        user_id=user_id,
                        discount_percentage=settings.REWARD_DISCOUNT_PERCENTAGE,
                        expiration_date=utcnow() + timedelta(days=settings.REWARD_VALIDITY_DAYS),
                        usage_limit=1,
                        minimum_purchase=settings.REWARD_MINIMUM_PURCHASE,
                    )
                except ConflictException:
                    continue
                logger.info(f"Issued reward coupon {coupon.code} to user {user_id}")
                return coupon

            logger.error(f"Could not find a free reward code for user {user_id}")
            return None
        except Exception as e:
            logger.error(f"Reward coupon issuance failed for user {user_id}: {str(e)}")
            await self.db.rollback()
            return None

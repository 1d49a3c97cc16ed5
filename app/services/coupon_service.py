"""
Coupon service for managing discount coupons
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict, Any, Iterable
import enum
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_, or_, case
from sqlalchemy.exc import IntegrityError

from app.models.coupon import Coupon
from app.models.user import User
from app.core.exceptions import (
    StorefrontException,
    ConflictException,
    InvalidCouponException,
    NotFoundException,
    ValidationException,
)
from app.utils.helpers import utcnow, round_money, to_decimal, to_naive_utc, Number
from app.utils.pagination import PaginationParams, paginate
from app.utils.validators import validate_coupon_code, validate_coupon_prefix

logger = logging.getLogger(__name__)


class CouponInvalidReason(str, enum.Enum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    USAGE_LIMIT_REACHED = "usage_limit_reached"
    MINIMUM_PURCHASE_NOT_MET = "minimum_purchase_not_met"


REASON_MESSAGES = {
    CouponInvalidReason.NOT_FOUND: "Invalid coupon code",
    CouponInvalidReason.EXPIRED: "Coupon has expired",
    CouponInvalidReason.USAGE_LIMIT_REACHED: "Coupon usage limit reached",
    CouponInvalidReason.MINIMUM_PURCHASE_NOT_MET: "Minimum purchase not met",
}


def _invalid(reason: CouponInvalidReason) -> InvalidCouponException:
    return InvalidCouponException(REASON_MESSAGES[reason], reason=reason.value)


@dataclass
class CouponValidation:
    """Outcome of checking a coupon against a cart total"""
    valid: bool
    message: str
    reason: Optional[CouponInvalidReason] = None
    code: Optional[str] = None
    discount_percentage: Optional[Decimal] = None
    discount_amount: Decimal = Decimal("0.00")

    @classmethod
    def rejected(cls, reason: CouponInvalidReason, message: Optional[str] = None) -> "CouponValidation":
        return cls(valid=False, reason=reason, message=message or REASON_MESSAGES[reason])

    def raise_if_invalid(self) -> None:
        if not self.valid:
            raise InvalidCouponException(self.message, reason=self.reason.value)


class CouponService:
    """
    Service for managing coupon operations

    A coupon is usable while it is active, unexpired and has uses left.
    Validation deactivates coupons it finds expired or exhausted.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find_active(self, user_id: uuid.UUID, code: str) -> Optional[Coupon]:
        result = await self.db.execute(
            select(Coupon).where(
                and_(
                    Coupon.code == code.strip().upper(),
                    Coupon.user_id == user_id,
                    Coupon.is_active.is_(True)
                )
            )
        )
        return result.scalar_one_or_none()

    async def _deactivate(self, coupon: Coupon) -> None:
        coupon.is_active = False
        await self.db.commit()
        logger.info(f"Deactivated stale coupon {coupon.code}")

    async def validate_coupon(
        self,
        user_id: uuid.UUID,
        code: str,
        cart_total: Number
    ) -> CouponValidation:
        """
        Validate a coupon for a user and compute its discount

        Args:
            user_id: Owner of the coupon
            code: Coupon code in any case
            cart_total: Pre-discount subtotal

        Returns:
            CouponValidation; invalid results carry the reason
        """
        coupon = await self._find_active(user_id, code)
        if coupon is None:
            return CouponValidation.rejected(CouponInvalidReason.NOT_FOUND)

        if coupon.is_expired():
            await self._deactivate(coupon)
            return CouponValidation.rejected(CouponInvalidReason.EXPIRED)

        if not coupon.has_uses_remaining():
            await self._deactivate(coupon)
            return CouponValidation.rejected(CouponInvalidReason.USAGE_LIMIT_REACHED)

        cart_total = to_decimal(cart_total)
        if cart_total < coupon.minimum_purchase:
            return CouponValidation.rejected(
                CouponInvalidReason.MINIMUM_PURCHASE_NOT_MET,
                f"Minimum purchase of ${round_money(coupon.minimum_purchase)} required",
            )

        return CouponValidation(
            valid=True,
            message="Coupon is valid",
            code=coupon.code,
            discount_percentage=coupon.discount_percentage,
            discount_amount=round_money(cart_total * coupon.discount_percentage / 100),
        )

    async def apply_coupon(self, user_id: uuid.UUID, code: str) -> Coupon:
        """
        Consume one use of a coupon

        The increment is a single conditional UPDATE so concurrent
        redemptions can never push used_count past usage_limit.

        Raises:
            InvalidCouponException: Coupon missing, expired or exhausted
        """
        coupon = await self._find_active(user_id, code)
        if coupon is None:
            raise _invalid(CouponInvalidReason.NOT_FOUND)
        if coupon.is_expired():
            await self._deactivate(coupon)
            raise _invalid(CouponInvalidReason.EXPIRED)

        next_count = Coupon.used_count + 1
        result = await self.db.execute(
            update(Coupon)
            .where(
                and_(
                    Coupon.id == coupon.id,
                    Coupon.is_active.is_(True),
                    or_(Coupon.usage_limit.is_(None), Coupon.used_count < Coupon.usage_limit)
                )
            )
            .values(
                used_count=next_count,
                is_active=case(
                    (and_(Coupon.usage_limit.is_not(None), next_count >= Coupon.usage_limit), False),
                    else_=Coupon.is_active
                ),
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise _invalid(CouponInvalidReason.USAGE_LIMIT_REACHED)

        await self.db.commit()
        await self.db.refresh(coupon)
        logger.info(f"Coupon {coupon.code} used {coupon.used_count} time(s)")
        return coupon

    async def create_coupon(
        self,
        code: str,
        user_id: uuid.UUID,
        discount_percentage: Number,
        expiration_date: datetime,
        usage_limit: Optional[int] = None,
        minimum_purchase: Number = 0
    ) -> Coupon:
        """
        Create a coupon for a user

        Raises:
            ValidationException: Malformed code or out-of-range values
            NotFoundException: User does not exist
            ConflictException: Code already taken
        """
        try:
            code = validate_coupon_code(code)
        except ValueError as e:
            raise ValidationException(str(e))

        discount_percentage = to_decimal(discount_percentage)
        if not Decimal("0") <= discount_percentage <= Decimal("100"):
            raise ValidationException("Discount percentage must be between 0 and 100")
        if usage_limit is not None and usage_limit < 1:
            raise ValidationException("Usage limit must be at least 1")
        minimum_purchase = to_decimal(minimum_purchase)
        if minimum_purchase < 0:
            raise ValidationException("Minimum purchase cannot be negative")

        expiration_date = to_naive_utc(expiration_date)
        if expiration_date <= utcnow():
            raise ValidationException("Expiration date must be in the future")

        if await self.db.get(User, user_id) is None:
            raise NotFoundException("User not found")

        existing = await self.db.execute(select(Coupon.id).where(Coupon.code == code))
        if existing.scalar_one_or_none() is not None:
            raise ConflictException("Coupon code already exists", error_code="DUPLICATE_COUPON_CODE")

        coupon = Coupon(
            code=code,
            user_id=user_id,
            discount_percentage=discount_percentage,
            expiration_date=expiration_date,
            usage_limit=usage_limit,
            used_count=0,
            minimum_purchase=minimum_purchase,
            is_active=True,
        )
        self.db.add(coupon)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with another writer for the same code
            await self.db.rollback()
            raise ConflictException("Coupon code already exists", error_code="DUPLICATE_COUPON_CODE")

        await self.db.refresh(coupon)
        logger.info(f"Created coupon {coupon.code} for user {user_id}")
        return coupon

    async def create_bulk_coupons(
        self,
        user_ids: Iterable[uuid.UUID],
        discount_percentage: Number,
        expiration_date: datetime,
        code_prefix: str = "PROMO",
        usage_limit: Optional[int] = None,
        minimum_purchase: Number = 0
    ) -> List[Coupon]:
        """
        Create one coupon per user from a shared template

        Codes are the prefix plus the last six characters of the user id.
        Users whose coupon cannot be created are skipped.
        """
        try:
            code_prefix = validate_coupon_prefix(code_prefix)
        except ValueError as e:
            raise ValidationException(str(e))

        created = []
        for user_id in user_ids:
            code = f"{code_prefix}{str(user_id).replace('-', '')[-6:].upper()}"
            try:
                coupon = await self.create_coupon(
                    code=code,
                    user_id=user_id,
                    discount_percentage=discount_percentage,
                    expiration_date=expiration_date,
                    usage_limit=usage_limit,
                    minimum_purchase=minimum_purchase,
                )
            except StorefrontException as e:
                logger.warning(f"Skipping bulk coupon {code} for user {user_id}: {e.detail}")
                continue
            created.append(coupon)
        return created

    async def cleanup_expired_coupons(self) -> int:
        """Deactivate every active coupon past its expiration date"""
        result = await self.db.execute(
            update(Coupon)
            .where(and_(Coupon.is_active.is_(True), Coupon.expiration_date < utcnow()))
            .values(is_active=False, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        count = result.rowcount or 0
        logger.info(f"Deactivated {count} expired coupon(s)")
        return count

    async def get_user_coupon(self, user_id: uuid.UUID) -> Optional[Coupon]:
        """Most recent usable coupon for a user"""
        result = await self.db.execute(
            select(Coupon)
            .where(
                and_(
                    Coupon.user_id == user_id,
                    Coupon.is_active.is_(True),
                    Coupon.expiration_date > utcnow()
                )
            )
            .order_by(Coupon.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_user_coupons(self, user_id: uuid.UUID) -> List[Coupon]:
        result = await self.db.execute(
            select(Coupon)
            .where(Coupon.user_id == user_id)
            .order_by(Coupon.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_all_coupons(
        self,
        params: PaginationParams,
        is_active: Optional[bool] = None
    ) -> Dict[str, Any]:
        query = select(Coupon).order_by(Coupon.created_at.desc())
        if is_active is not None:
            query = query.where(Coupon.is_active.is_(is_active))
        return await paginate(self.db, query, params)

    async def deactivate_coupon(self, coupon_id: uuid.UUID) -> Coupon:
        coupon = await self.db.get(Coupon, coupon_id)
        if coupon is None:
            raise NotFoundException("Coupon not found")
        coupon.is_active = False
        await self.db.commit()
        await self.db.refresh(coupon)
        return coupon

    async def delete_coupon(self, coupon_id: uuid.UUID) -> None:
        result = await self.db.execute(delete(Coupon).where(Coupon.id == coupon_id))
        if result.rowcount == 0:
            raise NotFoundException("Coupon not found")
        await self.db.commit()

"""
Coupon model
Percentage discounts owned by a single user
"""

from sqlalchemy import Column, String, Integer, Numeric, Boolean, ForeignKey, Index, CheckConstraint, DateTime, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
from typing import Optional

from .base import Base, TimestampedModel, UUIDModel, SerializableModel
from app.utils.helpers import utcnow

class Coupon(Base, TimestampedModel, UUIDModel, SerializableModel):
    """Discount coupon scoped to one user"""

    __tablename__ = "coupons"

    # Codes are stored uppercased and are unique across all users
    code = Column(String(20), unique=True, nullable=False, index=True)
    discount_percentage = Column(Numeric(5, 2), nullable=False)
    expiration_date = Column(DateTime, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Usage limits
    usage_limit = Column(Integer, nullable=True)  # None means unlimited
    used_count = Column(Integer, default=0, nullable=False)
    minimum_purchase = Column(Numeric(10, 2), default=0, nullable=False)

    # Relationships
    user = relationship("User", back_populates="coupons")

    # Constraints
    __table_args__ = (
        CheckConstraint("discount_percentage >= 0 AND discount_percentage <= 100", name="check_discount_range"),
        CheckConstraint("used_count >= 0", name="check_non_negative_used_count"),
        CheckConstraint("usage_limit IS NULL OR usage_limit >= 1", name="check_positive_usage_limit"),
        CheckConstraint("usage_limit IS NULL OR used_count <= usage_limit", name="check_usage_within_limit"),
        CheckConstraint("minimum_purchase >= 0", name="check_non_negative_minimum_purchase"),
        Index("idx_coupons_user_active", "user_id", "is_active"),
        Index("idx_coupons_code_active", "code", "is_active"),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expiration_date < (now or utcnow())

    def has_uses_remaining(self) -> bool:
        if self.usage_limit is None:
            return True
        return self.used_count < self.usage_limit

    @property
    def remaining_uses(self) -> Optional[int]:
        if self.usage_limit is None:
            return None
        return max(0, self.usage_limit - self.used_count)

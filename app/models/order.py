"""Order model with frozen line items"""

from sqlalchemy import Column, String, Numeric, Integer, Enum, ForeignKey, Index, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
import enum

from .base import Base, TimestampedModel, UUIDModel, SerializableModel

class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

class Order(Base, TimestampedModel, UUIDModel, SerializableModel):
    """Durable record of a paid checkout"""

    __tablename__ = "orders"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    # Status
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)

    # Amounts; total_amount is what the gateway captured
    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False)

    # Payment
    coupon_code = Column(String(20), nullable=True)
    payment_session_id = Column(String(255), unique=True, nullable=True)

    # Relationships
    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", lazy="selectin")

    # Constraints
    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="check_non_negative_total"),
        CheckConstraint("discount_amount >= 0", name="check_non_negative_discount"),
        Index("idx_orders_user_created", "user_id", "created_at"),
        Index("idx_orders_status_created", "status", "created_at"),
    )

class OrderItem(Base, UUIDModel, SerializableModel):
    """Individual items within an order (snapshot at time of order)"""

    __tablename__ = "order_items"

    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)

    product_name = Column(String(100), nullable=True)  # snapshot; None if product was gone at checkout
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="check_positive_order_quantity"),
        CheckConstraint("price >= 0", name="check_non_negative_item_price"),
    )

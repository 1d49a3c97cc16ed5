"""Product catalog model"""

from sqlalchemy import Column, String, Text, Numeric, Integer, Boolean, Enum, CheckConstraint, Index
from sqlalchemy.orm import relationship
import enum

from .base import Base, TimestampedModel, UUIDModel, SerializableModel

class ProductCategory(str, enum.Enum):
    ELECTRONICS = "electronics"
    CLOTHING = "clothing"
    FOOD = "food"
    BOOKS = "books"
    HOME = "home"
    SPORTS = "sports"
    TOYS = "toys"
    OTHER = "other"

class Product(Base, TimestampedModel, UUIDModel, SerializableModel):
    """Sellable product; the price here is authoritative at checkout"""

    __tablename__ = "products"

    # Basic info
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    category = Column(Enum(ProductCategory), nullable=False, index=True)

    # Pricing and inventory
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, default=0, nullable=False)

    # Media
    image = Column(String(500), nullable=False, default="")
    image_public_id = Column(String(255), nullable=True)  # image host handle for deletes

    # Flags
    is_featured = Column(Boolean, default=False, nullable=False, index=True)

    # Relationships
    cart_items = relationship("CartItem", back_populates="product", cascade="all, delete-orphan", passive_deletes=True)

    # Constraints
    __table_args__ = (
        CheckConstraint("price >= 0", name="check_non_negative_price"),
        CheckConstraint("stock >= 0", name="check_non_negative_stock"),
        Index("idx_products_featured_created", "is_featured", "created_at"),
    )

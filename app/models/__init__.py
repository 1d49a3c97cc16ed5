"""Models package initialization"""

from .base import Base
from .user import User, UserRole
from .product import Product, ProductCategory
from .cart import CartItem
from .coupon import Coupon
from .order import Order, OrderItem, OrderStatus

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Product",
    "ProductCategory",
    "CartItem",
    "Coupon",
    "Order",
    "OrderItem",
    "OrderStatus",
]

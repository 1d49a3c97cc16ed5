"""Services package"""

from .storage import StorageService
from .payment_gateway import RazorpayGateway
from .coupon_service import CouponService
from .reward_service import RewardService
from .cart_service import CartService
from .product_service import ProductService
from .order_service import OrderService
from .checkout_service import CheckoutService

__all__ = [
    "StorageService",
    "RazorpayGateway",
    "CouponService",
    "RewardService",
    "CartService",
    "ProductService",
    "OrderService",
    "CheckoutService",
]

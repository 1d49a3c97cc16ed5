"""API v1 routes aggregation"""

from fastapi import APIRouter

from .auth.router import router as auth_router
from .products.router import router as products_router
from .cart.router import router as cart_router
from .coupons.router import router as coupons_router
from .payments.router import router as payments_router
from .orders.router import router as orders_router
from .analytics.router import router as analytics_router

# Create v1 router
api_router = APIRouter()

# Include all routers
api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(products_router, prefix="/products", tags=["Products"])
api_router.include_router(cart_router, prefix="/cart", tags=["Cart"])
api_router.include_router(coupons_router, prefix="/coupons", tags=["Coupons"])
api_router.include_router(payments_router, prefix="/payments", tags=["Payments"])
api_router.include_router(orders_router, prefix="/orders", tags=["Orders"])
api_router.include_router(analytics_router, prefix="/analytics", tags=["Analytics"])

# Export router
router = api_router

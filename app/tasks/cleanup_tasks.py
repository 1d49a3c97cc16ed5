"""Cleanup and maintenance tasks"""

from celery.utils.log import get_task_logger
import asyncio

from app.core.celery_app import celery_app
from app.core.database import engine, get_db_context
from app.services.coupon_service import CouponService

logger = get_task_logger(__name__)

async def _cleanup_expired_coupons() -> int:
    try:
        async with get_db_context() as db:
            return await CouponService(db).cleanup_expired_coupons()
    finally:
        # Pooled connections are bound to this task's event loop
        await engine.dispose()

@celery_app.task(name="cleanup_expired_coupons", bind=True, max_retries=3)
def cleanup_expired_coupons(self):
    """Deactivate coupons past their expiration date"""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        count = loop.run_until_complete(_cleanup_expired_coupons())
        logger.info(f"Deactivated {count} expired coupons")
        return {"deactivated": count}
    except Exception as e:
        logger.error(f"Error cleaning up expired coupons: {str(e)}")
        raise self.retry(exc=e)
    finally:
        loop.close()

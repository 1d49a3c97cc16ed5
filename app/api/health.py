"""Health check endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Any
import logging
import time

from app.core.cache import RedisCache, get_cache
from app.core.config import settings
from app.core.database import get_db
from app.utils.helpers import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": utcnow().isoformat()
    }

@router.get("/health/detailed")
async def detailed_health_check(
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache)
) -> Dict[str, Any]:
    """Database and cache status; a cache running on its in-memory fallback is degraded"""
    health_status = {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "components": {}
    }

    started = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
        health_status["components"]["database"] = {
            "status": "healthy",
            "response_time_ms": round((time.perf_counter() - started) * 1000, 2)
        }
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        health_status["components"]["database"] = {"status": "unhealthy", "error": str(e)}
        health_status["status"] = "unhealthy"

    if cache.is_connected:
        health_status["components"]["cache"] = {"status": "healthy"}
    else:
        health_status["components"]["cache"] = {"status": "degraded", "backend": "in-memory"}
        if health_status["status"] == "healthy":
            health_status["status"] = "degraded"

    return health_status

"""
Redis cache configuration and utilities
Holds the analytics snapshots, featured products and refresh tokens
"""

import redis.asyncio as redis
from typing import Dict, List, Optional, Any, Tuple, Union
from fastapi import Request
import json
import time
from datetime import timedelta
import logging

from .config import settings

logger = logging.getLogger(__name__)

Expiry = Optional[Union[int, timedelta]]

def _ttl_seconds(expire: Expiry) -> Optional[int]:
    if isinstance(expire, timedelta):
        return int(expire.total_seconds())
    return expire or None

class _MemoryStore:
    """Process-local stand-in used while Redis is unreachable"""

    def __init__(self):
        self._entries: Dict[str, Tuple[str, Optional[float]]] = {}

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        payload, deadline = entry
        if deadline is not None and time.monotonic() >= deadline:
            del self._entries[key]
            return None
        return payload

    def set(self, key: str, payload: str, ttl: Optional[int]) -> None:
        deadline = time.monotonic() + ttl if ttl else None
        self._entries[key] = (payload, deadline)

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._entries.pop(key, None) is not None:
                removed += 1
        return removed

    def keys_with_prefix(self, prefix: str) -> List[str]:
        return [key for key in self._entries if key.startswith(prefix)]

class RedisCache:
    """Redis cache manager with in-memory fallback

    Values are stored as JSON. Every operation degrades to a miss or no-op
    on failure; cache errors are logged and never raised to callers.
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.REDIS_URL
        self.redis_client: Optional[redis.Redis] = None
        self._memory = _MemoryStore()
        self._use_redis = False

    @property
    def is_connected(self) -> bool:
        return self._use_redis and self.redis_client is not None

    async def connect(self):
        """Open the Redis pool, falling back to memory if the ping fails"""
        try:
            self.redis_client = redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=settings.REDIS_DECODE_RESPONSES,
                max_connections=settings.REDIS_MAX_CONNECTIONS
            )
            await self.redis_client.ping()
            self._use_redis = True
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Failed to connect to Redis, using in-memory fallback: {e}")
            self._use_redis = False

    async def disconnect(self):
        if self.redis_client:
            await self.redis_client.close()
            logger.info("Redis connection closed")

    async def get(self, key: str) -> Optional[Any]:
        try:
            if self.is_connected:
                raw = await self.redis_client.get(key)
            else:
                raw = self._memory.get(key)
            return None if raw is None else json.loads(raw)
        except Exception as e:
            logger.error(f"Cache get error for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, expire: Expiry = None) -> bool:
        """Store a JSON-serializable value, optionally with a TTL"""
        try:
            payload = json.dumps(value, default=str)
            ttl = _ttl_seconds(expire)
            if not self.is_connected:
                self._memory.set(key, payload, ttl)
                return True
            if ttl:
                return bool(await self.redis_client.setex(key, ttl, payload))
            return bool(await self.redis_client.set(key, payload))
        except Exception as e:
            logger.error(f"Cache set error for {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        try:
            if self.is_connected:
                return bool(await self.redis_client.delete(key))
            return self._memory.delete(key) > 0
        except Exception as e:
            logger.error(f"Cache delete error for {key}: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a trailing-wildcard pattern such as ``prefix:*``"""
        try:
            if not self.is_connected:
                return self._memory.delete(*self._memory.keys_with_prefix(pattern.rstrip("*")))
            keys = [key async for key in self.redis_client.scan_iter(match=pattern)]
            return await self.redis_client.delete(*keys) if keys else 0
        except Exception as e:
            logger.error(f"Cache delete pattern error for {pattern}: {e}")
            return 0

def get_cache(request: Request) -> RedisCache:
    """Dependency returning the application's cache handle"""
    return request.app.state.cache

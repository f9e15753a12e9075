"""
Cache adapters

MemoryCache keeps entries in-process and is the default; RedisCache is
selected with CACHE_BACKEND=redis and shares entries across workers.
"""

import logging
import time
from typing import Dict, Optional, Tuple

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from src.app.services.cache import ICache

logger = logging.getLogger(__name__)


class MemoryCache(ICache):
    """Process-local cache; expired entries are dropped on read and swept on write"""

    def __init__(self):
        self._entries: Dict[str, Tuple[str, float]] = {}

    def _live(self, key: str, now: float) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= now:
            self._entries.pop(key, None)
            return None
        return value

    def _prune(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    async def get(self, key: str) -> Optional[str]:
        return self._live(key, time.monotonic())

    async def set(self, key: str, value: str, ttl: int) -> None:
        if ttl <= 0:
            return
        now = time.monotonic()
        self._prune(now)
        self._entries[key] = (value, now + ttl)

    async def add(self, key: str, value: str, ttl: int) -> bool:
        if ttl <= 0:
            return False
        now = time.monotonic()
        self._prune(now)
        if key in self._entries:
            return False
        self._entries[key] = (value, now + ttl)
        return True

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._entries.pop(key, None)


class RedisCache(ICache):
    """
    Redis-backed cache.

    Read-through failures (get, add) are logged and treated as misses so the
    database stays the source of truth. set and delete carry revocations and
    propagate their failures.
    """

    def __init__(self, redis_url: str):
        self.client = aioredis.from_url(redis_url, decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.client.get(key)
        except RedisError as exc:
            logger.warning(f"Cache read failed for {key}: {exc}")
            return None

    async def set(self, key: str, value: str, ttl: int) -> None:
        if ttl <= 0:
            return
        await self.client.set(key, value, ex=ttl)

    async def add(self, key: str, value: str, ttl: int) -> bool:
        if ttl <= 0:
            return False
        try:
            return bool(await self.client.set(key, value, ex=ttl, nx=True))
        except RedisError as exc:
            logger.warning(f"Cache write failed for {key}: {exc}")
            return False

    async def delete(self, *keys: str) -> None:
        if keys:
            await self.client.delete(*keys)

    async def close(self) -> None:
        await self.client.aclose()


def build_cache(backend: str, redis_url: Optional[str] = None) -> ICache:
    """Cache for the configured backend ("memory" or "redis")"""
    if backend == "redis":
        if not redis_url:
            raise ValueError("REDIS_URL is required when CACHE_BACKEND is redis")
        logger.info("Using Redis cache backend")
        return RedisCache(redis_url)
    if backend != "memory":
        raise ValueError(f"Unknown cache backend: {backend}")
    return MemoryCache()

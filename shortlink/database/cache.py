"""Cache layer for short-link mappings.

The cache only ever holds code -> target. Implementations raise CacheError on
failure; callers decide whether to absorb it.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..errors import CacheError


CACHE_KEY_PREFIX = "shortlink"


def get_cache_key(short_code: str) -> str:
    """Generate cache key for short code."""
    return f"{CACHE_KEY_PREFIX}:{short_code}"


class CacheBase(ABC):
    """Abstract base class for the code -> target cache."""

    ttl_seconds: int = 3600

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get value from cache. A missing key returns None, not an error."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Set value with a TTL in seconds (defaults to ttl_seconds)."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete key, returning True if it existed."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if key exists."""

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass

    get_cache_key = staticmethod(get_cache_key)


class RedisCache(CacheBase):
    """Redis cache for short-link mappings."""

    def __init__(
        self,
        redis_url: str,
        ttl_seconds: int = 3600,
        timeout_seconds: float = 0.5,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: Default TTL for cached items
            timeout_seconds: Bound on every cache call
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.timeout_seconds = timeout_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        """Create the client and check connectivity.

        A failed ping is logged; every later call still raises CacheError
        until Redis becomes reachable.
        """
        self.client = redis.from_url(
            self.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=self.timeout_seconds,
            socket_connect_timeout=self.timeout_seconds,
        )
        try:
            await self._call("ping")
            self.logger.info(f"Connected to Redis with TTL={self.ttl_seconds}s")
        except CacheError as e:
            self.logger.error(f"Failed to connect to Redis: {e}")

    async def _call(self, method: str, *args, **kwargs):
        """Run one client command bounded by timeout_seconds."""
        if self.client is None:
            raise CacheError("Redis client not connected")
        try:
            return await asyncio.wait_for(
                getattr(self.client, method)(*args, **kwargs),
                timeout=self.timeout_seconds,
            )
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            raise CacheError(f"Redis {method} failed: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        return await self._call("get", key)

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        await self._call("set", key, value, ex=ttl or self.ttl_seconds)

    async def delete(self, key: str) -> bool:
        return await self._call("delete", key) > 0

    async def exists(self, key: str) -> bool:
        return await self._call("exists", key) > 0

    async def health_check(self) -> bool:
        try:
            await self._call("ping")
            return True
        except CacheError:
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")


class MemoryCache(CacheBase):
    """Process-local TTL cache for development and tests."""

    def __init__(self, ttl_seconds: int = 3600, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}

    def _live(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, deadline = entry
        if self._clock() >= deadline:
            del self._entries[key]
            return None
        return value

    async def get(self, key: str) -> Optional[str]:
        return self._live(key)

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        ttl = ttl or self.ttl_seconds
        self._entries[key] = (value, self._clock() + ttl)

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

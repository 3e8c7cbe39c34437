"""Select store and cache backends from configuration.

Keeps the rest of the engine ignorant of where data lives. The config object
only needs the attributes read here (see config.Config).
"""

import logging
from typing import Optional

from .base import LinkStoreBase
from .cache import CacheBase, MemoryCache, RedisCache
from .memory import MemoryLinkStore
from .postgres import PostgresLinkStore


def build_store(config, logger: Optional[logging.Logger] = None) -> LinkStoreBase:
    """Return a store for config.storage_backend ("memory" or "postgres")."""
    backend = (config.storage_backend or "memory").strip().lower()

    if backend == "memory":
        return MemoryLinkStore()

    if backend == "postgres":
        if not config.database_url:
            raise ValueError("DATABASE_URL is required for the postgres storage backend")
        return PostgresLinkStore(
            db_config=config.database_url,
            pool_max_size=config.db_pool_max_size,
            timeout_seconds=config.store_timeout_seconds,
            logger=logger,
        )

    raise ValueError(f"Unknown storage backend: {backend!r}")


async def build_cache(config, logger: Optional[logging.Logger] = None) -> Optional[CacheBase]:
    """Return a connected cache for config.cache_backend, or None when disabled."""
    backend = (config.cache_backend or "none").strip().lower()

    if backend == "none":
        return None

    if backend == "memory":
        return MemoryCache(ttl_seconds=config.cache_ttl_seconds)

    if backend == "redis":
        if not config.redis_url:
            raise ValueError("REDIS_URL is required for the redis cache backend")
        cache = RedisCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            timeout_seconds=config.cache_timeout_seconds,
            logger=logger,
        )
        await cache.connect()
        return cache

    raise ValueError(f"Unknown cache backend: {backend!r}")

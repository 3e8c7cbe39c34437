"""Store and cache layer for short links."""

from .base import LinkStoreBase
from .cache import CacheBase, MemoryCache, RedisCache, get_cache_key
from .memory import MemoryLinkStore
from .models import LinkStats, LinkStatus, ShortLink
from .postgres import PostgresLinkStore

__all__ = [
    "LinkStoreBase",
    "CacheBase",
    "MemoryCache",
    "RedisCache",
    "get_cache_key",
    "MemoryLinkStore",
    "PostgresLinkStore",
    "LinkStats",
    "LinkStatus",
    "ShortLink",
]

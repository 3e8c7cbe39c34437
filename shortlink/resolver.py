"""Read path: resolve a short code to its target with cache-aside lookups."""

import logging
from datetime import datetime
from typing import Callable, Optional

from .accounting import ClickAccountant
from .database.base import LinkStoreBase
from .database.cache import CacheBase, get_cache_key
from .errors import ExpiredError, NotFoundError
from .expiration import cache_ttl_for, utcnow
from .shortcode import is_valid_code


class CacheAsideResolver:
    """Hot-path resolver: cache first, store on miss, repopulate afterwards.

    Cache entries are only written from active, unexpired store reads and never
    outlive the record's expiry, so a cache hit is trusted as live. Cache
    failures and timeouts degrade to a miss; store failures propagate.
    """

    def __init__(
        self,
        store: LinkStoreBase,
        accountant: ClickAccountant,
        cache: Optional[CacheBase] = None,
        logger: Optional[logging.Logger] = None,
        cache_ttl_seconds: int = 3600,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.accountant = accountant
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self.cache_ttl_seconds = cache_ttl_seconds
        self.clock = clock

    async def resolve(self, code: str) -> str:
        """Resolve a short code to its target URL and record the click.

        Args:
            code: The short code to resolve

        Returns:
            Target URL

        Raises:
            NotFoundError: Unknown or deactivated code
            ExpiredError: Code exists but has expired
            StoreError: Store failure or timeout
        """
        if not is_valid_code(code):
            raise NotFoundError(code)

        cached = await self._cache_get(code)
        if cached:
            self.logger.debug(f"Cache hit for {code}")
            self.accountant.schedule(code)
            return cached

        link = await self.store.find_active_by_code(code)
        if link is None:
            self.logger.debug(f"Short code not found: {code}")
            raise NotFoundError(code)

        now = self.clock()
        if link.is_expired(now):
            self.logger.info(f"Attempted to access expired URL: {code}")
            await self._cache_delete(code)
            raise ExpiredError(code)

        try:
            await self.accountant.record_access(code)
        except Exception as e:
            self.logger.error(f"Failed to increment click count for {code}: {e}")

        ttl = cache_ttl_for(link.expires_at, self.cache_ttl_seconds, now)
        if ttl > 0:
            await self._cache_set(code, link.target, ttl)

        self.logger.debug(f"Retrieved URL: {code} -> {link.target}")
        return link.target

    async def _cache_get(self, code: str) -> Optional[str]:
        if self.cache is None:
            return None
        try:
            return await self.cache.get(get_cache_key(code))
        except Exception as e:
            self.logger.warning(f"Cache get failed for {code}, falling back to store: {e}")
            return None

    async def _cache_set(self, code: str, target: str, ttl: int) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.set(get_cache_key(code), target, ttl)
        except Exception as e:
            self.logger.warning(f"Failed to update cache for {code}: {e}")

    async def _cache_delete(self, code: str) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.delete(get_cache_key(code))
        except Exception as e:
            self.logger.warning(f"Failed to evict {code} from cache: {e}")

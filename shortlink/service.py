"""Business logic service for the URL shortener."""

import logging
from typing import Any, Dict, Optional

from .accounting import ClickAccountant
from .database.base import LinkStoreBase
from .database.cache import CacheBase, get_cache_key
from .database.models import LinkStats, ShortLink
from .errors import NotFoundError
from .expiration import utcnow
from .resolver import CacheAsideResolver
from .shortcode import ShortCodeGenerator
from .shortener import ShortenOrchestrator, ShortenResult


class URLShortenerService:
    """Service layer wiring the write path, the read path and click accounting."""

    def __init__(
        self,
        db: LinkStoreBase,
        cache: Optional[CacheBase] = None,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        base_url: str = "http://localhost:9200",
        path_prefix: str = "",
        cache_ttl_seconds: int = 3600,
        default_expiration_days: int = 0,
        max_collision_retries: int = 5,
        max_pending_clicks: int = 10000,
    ):
        """Initialize URL shortener service.

        Args:
            db: Store instance
            cache: Optional cache instance
            short_code_generator: Optional short code generator
            logger: Optional logger
            base_url: Base URL for short links
            path_prefix: Path prefix for short links
            cache_ttl_seconds: TTL for cached mappings
            default_expiration_days: Default lifetime in days (0 = never)
            max_collision_retries: Maximum retries on collision
            max_pending_clicks: Bound on fire-and-forget click updates
        """
        self.db = db
        self.cache = cache
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)

        self.accountant = ClickAccountant(db, logger=self.logger, max_pending=max_pending_clicks)
        self.shortener = ShortenOrchestrator(
            store=db,
            cache=cache,
            generator=self.generator,
            logger=self.logger,
            base_url=base_url,
            path_prefix=path_prefix,
            cache_ttl_seconds=cache_ttl_seconds,
            default_expiration_days=default_expiration_days,
            max_collision_retries=max_collision_retries,
        )
        self.resolver = CacheAsideResolver(
            store=db,
            accountant=self.accountant,
            cache=cache,
            logger=self.logger,
            cache_ttl_seconds=cache_ttl_seconds,
        )

    @classmethod
    def from_config(cls, config, db, cache=None, logger=None) -> "URLShortenerService":
        """Build a service from a config.Config instance."""
        return cls(
            db=db,
            cache=cache,
            short_code_generator=ShortCodeGenerator(
                default_length=config.short_code_length,
                strategy=config.code_strategy,
            ),
            logger=logger,
            base_url=config.base_url,
            path_prefix=config.path_prefix,
            cache_ttl_seconds=config.cache_ttl_seconds,
            default_expiration_days=config.default_expiration_days,
            max_collision_retries=config.max_collision_retries,
            max_pending_clicks=config.max_pending_clicks,
        )

    async def shorten(
        self,
        target: str,
        custom_code: Optional[str] = None,
        expiry_days: Optional[int] = None,
    ) -> ShortenResult:
        """Create a short link (see ShortenOrchestrator.shorten)."""
        return await self.shortener.shorten(target, custom_code=custom_code, expiry_days=expiry_days)

    async def resolve(self, code: str) -> str:
        """Resolve a code to its target (see CacheAsideResolver.resolve)."""
        return await self.resolver.resolve(code)

    async def get_url_info(self, short_code: str) -> ShortLink:
        """Get the active link for a code.

        Raises:
            NotFoundError: If no active link owns the code
        """
        link = await self.db.find_active_by_code(short_code)
        if link is None:
            raise NotFoundError(short_code)
        return link

    async def get_url_stats(self, short_code: str) -> LinkStats:
        """Get access statistics for a code, including deactivated links."""
        link = await self.db.find_latest_by_code(short_code)
        if link is None:
            raise NotFoundError(short_code)
        return LinkStats.from_link(link)

    async def url_exists(self, short_code: str) -> bool:
        return await self.db.exists_active(short_code)

    async def delete_short_url(self, short_code: str) -> None:
        """Deactivate a short link and evict it from the cache.

        Raises:
            NotFoundError: If no active link owns the code
        """
        if not await self.db.deactivate(short_code):
            raise NotFoundError(short_code)

        if self.cache:
            try:
                await self.cache.delete(get_cache_key(short_code))
            except Exception as e:
                self.logger.warning(f"Failed to delete {short_code} from cache: {e}")

        self.logger.info(f"Deleted short URL: {short_code}")

    async def deactivate_expired(self) -> int:
        """Soft-delete every active link whose expiry has passed.

        Cache entries need no eviction: their TTL never outlives the expiry.
        """
        count = await self.db.deactivate_expired(utcnow())
        if count:
            self.logger.info(f"Deactivated {count} expired short links")
        return count

    async def get_statistics(self) -> Dict[str, Any]:
        """Get service statistics."""
        db_stats = await self.db.get_statistics()
        return {
            **db_stats,
            "cache_enabled": self.cache is not None,
            "pending_clicks": self.accountant.pending,
            "dropped_clicks": self.accountant.dropped,
        }

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.db.health_check()
        cache_healthy = await self.cache.health_check() if self.cache else True

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Flush pending click updates and close connections."""
        await self.accountant.drain()
        await self.db.close()
        if self.cache:
            await self.cache.close()

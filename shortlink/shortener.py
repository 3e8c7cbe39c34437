"""Write path: turn a target URL into a persisted short link."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .common.url_builder import build_short_url
from .database.base import LinkStoreBase
from .database.cache import CacheBase, get_cache_key
from .database.models import LinkStatus, ShortLink
from .errors import CodeTakenError, GenerationExhaustedError, ValidationError
from .expiration import cache_ttl_for, expiry_from_days, utcnow
from .shortcode import MAX_CODE_LENGTH, MIN_CODE_LENGTH, ShortCodeGenerator


@dataclass
class ShortenResult:
    """Outcome of a shorten call."""

    link: ShortLink
    short_url: str
    created: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "short_code": self.link.code,
            "short_url": self.short_url,
            "original_url": self.link.target,
            "created_at": self.link.created_at,
            "expires_at": self.link.expires_at,
        }


class ShortenOrchestrator:
    """Coordinates dedup, custom aliases, collision retry, persistence and cache seeding.

    The existence checks made before inserting are optimistic; the store's
    unique constraint on active codes decides concurrent races.
    """

    def __init__(
        self,
        store: LinkStoreBase,
        cache: Optional[CacheBase] = None,
        generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        base_url: str = "http://localhost:9200",
        path_prefix: str = "",
        cache_ttl_seconds: int = 3600,
        default_expiration_days: int = 0,
        max_collision_retries: int = 5,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize shorten orchestrator.

        Args:
            store: Authoritative link store
            cache: Optional code -> target cache
            generator: Short code generator
            logger: Optional logger
            base_url: Base URL used to build short URLs
            path_prefix: Optional path prefix for short URLs
            cache_ttl_seconds: TTL for cache entries
            default_expiration_days: Default link lifetime (0 = never expires)
            max_collision_retries: Candidates tried before giving up
            clock: Source of the current time
        """
        self.store = store
        self.cache = cache
        self.generator = generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.base_url = base_url
        self.path_prefix = path_prefix
        self.cache_ttl_seconds = cache_ttl_seconds
        self.default_expiration_days = default_expiration_days
        self.max_collision_retries = max_collision_retries
        self.clock = clock

    async def shorten(
        self,
        target: str,
        custom_code: Optional[str] = None,
        expiry_days: Optional[int] = None,
    ) -> ShortenResult:
        """Create (or return the existing) short link for a normalized target.

        Args:
            target: Normalized target URL, already validated by the caller
            custom_code: Optional caller-chosen code
            expiry_days: Optional lifetime override in days

        Returns:
            ShortenResult with the persisted link

        Raises:
            ValidationError: Invalid custom code or expiry
            CodeTakenError: Custom code owned by an active link, or lost an insert race
            GenerationExhaustedError: No free code within max_collision_retries
            StoreError: Store failure; nothing is written to the cache
        """
        if expiry_days is not None and expiry_days < 0:
            raise ValidationError("expiry_days must not be negative")

        now = self.clock()

        existing = await self.store.find_active_by_target(target)
        if existing is not None and not existing.is_expired(now):
            self.logger.info(f"URL already shortened, returning existing: {existing.code}")
            return ShortenResult(existing, self._short_url(existing.code), created=False)

        if custom_code:
            code = await self._claim_custom_code(custom_code)
        else:
            code = await self._generate_unique_code()

        link = ShortLink(
            code=code,
            target=target,
            created_at=now,
            expires_at=self._resolve_expiry(expiry_days, now),
            status=LinkStatus.ACTIVE,
            is_custom=bool(custom_code),
        )

        try:
            link = await self.store.create(link)
        except CodeTakenError:
            self.logger.warning(f"Short code claimed concurrently: {code}")
            raise

        await self._seed_cache(link, now)

        self.logger.info(f"Created short URL: {code} -> {target} (custom={link.is_custom})")
        return ShortenResult(link, self._short_url(code), created=True)

    async def _claim_custom_code(self, custom_code: str) -> str:
        if not self.generator.is_valid(custom_code):
            raise ValidationError(
                f"Custom short code must be {MIN_CODE_LENGTH}-{MAX_CODE_LENGTH} "
                "characters from 0-9, A-Z, a-z"
            )
        if await self.store.exists_active(custom_code):
            raise CodeTakenError(custom_code)
        return custom_code

    async def _generate_unique_code(self) -> str:
        """Generate a short code not owned by any active link.

        Raises:
            GenerationExhaustedError: If every candidate is taken
        """
        for attempt in range(1, self.max_collision_retries + 1):
            code = await self._next_candidate()

            if not await self.store.exists_active(code):
                if attempt > 1:
                    self.logger.debug(f"Generated code after {attempt} attempts: {code}")
                return code

            self.logger.warning(f"Short code collision detected, retrying: {code} (attempt {attempt})")

        self.logger.error(
            f"Unable to generate unique short code after {self.max_collision_retries} attempts"
        )
        raise GenerationExhaustedError(self.max_collision_retries)

    async def _next_candidate(self) -> str:
        if self.generator.sequential:
            return self.generator.from_id(await self.store.next_id())
        return self.generator.generate()

    def _resolve_expiry(self, expiry_days: Optional[int], now: datetime) -> Optional[datetime]:
        if expiry_days:
            return expiry_from_days(expiry_days, now)
        return expiry_from_days(self.default_expiration_days, now)

    async def _seed_cache(self, link: ShortLink, now: datetime) -> None:
        if self.cache is None:
            return
        ttl = cache_ttl_for(link.expires_at, self.cache_ttl_seconds, now)
        if ttl <= 0:
            return
        try:
            await self.cache.set(get_cache_key(link.code), link.target, ttl)
        except Exception as e:
            self.logger.warning(f"Failed to cache URL {link.code}: {e}")

    def _short_url(self, code: str) -> str:
        return build_short_url(code, self.base_url, self.path_prefix)

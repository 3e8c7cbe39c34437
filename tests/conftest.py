"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from shortlink.common.logging_config import setup_logging
from shortlink.database.cache import MemoryCache
from shortlink.database.memory import MemoryLinkStore
from shortlink.database.models import ShortLink
from shortlink.service import URLShortenerService
from shortlink.shortcode import ShortCodeGenerator


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def store() -> MemoryLinkStore:
    return MemoryLinkStore()


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache(ttl_seconds=3600)


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def service(store, cache, short_code_generator, logger) -> URLShortenerService:
    """Create service instance with an in-memory store and cache."""
    return URLShortenerService(
        db=store,
        cache=cache,
        short_code_generator=short_code_generator,
        logger=logger,
        base_url="https://sho.rt",
    )


@pytest.fixture
def uncached_service(store, short_code_generator, logger) -> URLShortenerService:
    """Service without a cache, so every resolve goes to the store."""
    return URLShortenerService(
        db=store,
        cache=None,
        short_code_generator=short_code_generator,
        logger=logger,
        base_url="https://sho.rt",
    )


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def make_link(store, now):
    """Insert a link directly into the store."""

    async def _make(code="abc123", target="https://example.com/page", expires_in=None, **kwargs):
        link = ShortLink(
            code=code,
            target=target,
            created_at=now - timedelta(days=1),
            expires_at=now + expires_in if expires_in is not None else None,
            **kwargs,
        )
        return await store.create(link)

    return _make


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]

"""Tests for the shorten write path."""

import asyncio
from datetime import timedelta

import pytest

from shortlink.database.cache import get_cache_key
from shortlink.errors import (
    CacheError,
    CodeTakenError,
    GenerationExhaustedError,
    StoreError,
    ValidationError,
)
from shortlink.shortcode import ShortCodeGenerator
from shortlink.shortener import ShortenOrchestrator

from helpers import FailingCache, ScriptedGenerator


class FailingCreateStore:
    """Delegates to a real store but fails every insert."""

    def __init__(self, store, error):
        self.store = store
        self.error = error

    def __getattr__(self, name):
        return getattr(self.store, name)

    async def create(self, link):
        raise self.error


@pytest.fixture
def orchestrator(store, cache, short_code_generator, logger, now):
    return ShortenOrchestrator(
        store=store,
        cache=cache,
        generator=short_code_generator,
        logger=logger,
        base_url="https://sho.rt",
        clock=lambda: now,
    )


@pytest.mark.asyncio
class TestShorten:
    """Test link creation."""

    async def test_shorten_creates_link(self, orchestrator, store, sample_urls):
        result = await orchestrator.shorten(sample_urls[0])

        assert result.created
        assert result.link.target == sample_urls[0]
        assert result.short_url == f"https://sho.rt/{result.link.code}"
        assert len(result.link.code) == 6
        assert not result.link.is_custom
        assert await store.exists_active(result.link.code)

    async def test_shorten_seeds_cache(self, orchestrator, cache, sample_urls):
        result = await orchestrator.shorten(sample_urls[0])

        assert await cache.get(get_cache_key(result.link.code)) == sample_urls[0]

    async def test_duplicate_target_returns_existing_link(self, orchestrator, store, sample_urls):
        first = await orchestrator.shorten(sample_urls[0])
        second = await orchestrator.shorten(sample_urls[0])

        assert second.link.code == first.link.code
        assert not second.created
        assert (await store.get_statistics())["total_urls"] == 1

    async def test_expired_target_gets_new_link(self, store, cache, logger, now, make_link, sample_urls):
        await make_link("old001", target=sample_urls[1], expires_in=timedelta(seconds=-10))
        orchestrator = ShortenOrchestrator(store=store, cache=cache, logger=logger, clock=lambda: now)

        result = await orchestrator.shorten(sample_urls[1])

        assert result.created
        assert result.link.code != "old001"

    async def test_custom_code(self, orchestrator, sample_urls):
        result = await orchestrator.shorten(sample_urls[0], custom_code="MyLink1")

        assert result.link.code == "MyLink1"
        assert result.link.is_custom

    async def test_custom_code_taken(self, orchestrator, store, sample_urls):
        await orchestrator.shorten(sample_urls[0], custom_code="taken1")

        with pytest.raises(CodeTakenError):
            await orchestrator.shorten(sample_urls[1], custom_code="taken1")

        assert await store.find_active_by_target(sample_urls[1]) is None
        assert (await store.get_statistics())["total_urls"] == 1

    @pytest.mark.parametrize("custom_code", ["abc", "a" * 13, "bad-code", "no space"])
    async def test_invalid_custom_code(self, orchestrator, store, custom_code, sample_urls):
        with pytest.raises(ValidationError):
            await orchestrator.shorten(sample_urls[0], custom_code=custom_code)

        assert (await store.get_statistics())["total_urls"] == 0

    async def test_custom_code_freed_by_deactivation(self, orchestrator, store, sample_urls):
        await orchestrator.shorten(sample_urls[0], custom_code="reuse1")
        await store.deactivate("reuse1")

        result = await orchestrator.shorten(sample_urls[1], custom_code="reuse1")

        assert result.link.target == sample_urls[1]
        assert (await store.find_active_by_code("reuse1")).target == sample_urls[1]

    async def test_negative_expiry_rejected(self, orchestrator, sample_urls):
        with pytest.raises(ValidationError):
            await orchestrator.shorten(sample_urls[0], expiry_days=-1)


@pytest.mark.asyncio
class TestCollisionRetry:
    """Test candidate retries on generated-code collisions."""

    async def test_persists_first_free_candidate(self, store, cache, logger, make_link, sample_urls):
        for code in ("coll01", "coll02", "coll03"):
            await make_link(code, target=f"https://example.com/{code}")
        generator = ScriptedGenerator(["coll01", "coll02", "coll03", "free04", "free05"])
        orchestrator = ShortenOrchestrator(
            store=store, cache=cache, generator=generator, logger=logger, max_collision_retries=5
        )

        result = await orchestrator.shorten(sample_urls[0])

        assert result.link.code == "free04"
        assert generator.calls == 4

    async def test_exhausted_retries(self, store, logger, make_link, sample_urls):
        await make_link("same01", target="https://example.com/same")
        generator = ScriptedGenerator(["same01"] * 3)
        orchestrator = ShortenOrchestrator(
            store=store, generator=generator, logger=logger, max_collision_retries=3
        )

        with pytest.raises(GenerationExhaustedError) as exc_info:
            await orchestrator.shorten(sample_urls[0])

        assert exc_info.value.attempts == 3
        assert generator.calls == 3
        assert await store.find_active_by_target(sample_urls[0]) is None

    async def test_exhaustion_is_a_conflict(self):
        assert issubclass(GenerationExhaustedError, CodeTakenError)


@pytest.mark.asyncio
class TestConcurrentCreate:
    """The store constraint decides races the pre-check cannot see."""

    async def test_same_custom_code_exactly_one_winner(self, orchestrator, store):
        results = await asyncio.gather(
            *[
                orchestrator.shorten(f"https://example.com/race/{i}", custom_code="race01")
                for i in range(10)
            ],
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, Exception)]
        losers = [r for r in results if isinstance(r, Exception)]
        assert len(winners) == 1
        assert all(isinstance(e, CodeTakenError) for e in losers)
        assert (await store.get_statistics())["active_urls"] == 1

    async def test_insert_race_surfaces_code_taken(self, store, cache, logger, sample_urls):
        racing = FailingCreateStore(store, CodeTakenError("late01"))
        orchestrator = ShortenOrchestrator(store=racing, cache=cache, logger=logger)

        with pytest.raises(CodeTakenError):
            await orchestrator.shorten(sample_urls[0], custom_code="late01")

        assert await cache.get(get_cache_key("late01")) is None


@pytest.mark.asyncio
class TestFailures:
    """Test cache and store failures on the write path."""

    async def test_cache_failure_is_not_fatal(self, store, logger, sample_urls):
        orchestrator = ShortenOrchestrator(
            store=store, cache=FailingCache(CacheError("redis down")), logger=logger
        )

        result = await orchestrator.shorten(sample_urls[0])

        assert result.created
        assert await store.exists_active(result.link.code)

    async def test_store_failure_writes_nothing_to_cache(self, store, cache, logger, sample_urls):
        orchestrator = ShortenOrchestrator(
            store=FailingCreateStore(store, StoreError("timeout")), cache=cache, logger=logger
        )

        with pytest.raises(StoreError):
            await orchestrator.shorten(sample_urls[0], custom_code="fail01")

        assert await cache.get(get_cache_key("fail01")) is None


@pytest.mark.asyncio
class TestExpiry:
    """Test expiry precedence."""

    async def test_no_expiry_by_default(self, orchestrator, sample_urls):
        result = await orchestrator.shorten(sample_urls[0])
        assert result.link.expires_at is None

    async def test_request_expiry_wins(self, store, logger, now, sample_urls):
        orchestrator = ShortenOrchestrator(
            store=store, logger=logger, default_expiration_days=30, clock=lambda: now
        )

        result = await orchestrator.shorten(sample_urls[0], expiry_days=7)

        assert result.link.expires_at == now + timedelta(days=7)

    async def test_default_expiry_applies(self, store, logger, now, sample_urls):
        orchestrator = ShortenOrchestrator(
            store=store, logger=logger, default_expiration_days=30, clock=lambda: now
        )

        result = await orchestrator.shorten(sample_urls[0])

        assert result.link.expires_at == now + timedelta(days=30)

    async def test_zero_override_falls_back_to_default(self, store, logger, now, sample_urls):
        orchestrator = ShortenOrchestrator(
            store=store, logger=logger, default_expiration_days=30, clock=lambda: now
        )

        result = await orchestrator.shorten(sample_urls[0], expiry_days=0)

        assert result.link.expires_at == now + timedelta(days=30)

    async def test_cache_ttl_bounded_by_expiry(self, store, logger, now, sample_urls):
        recorded = {}

        class RecordingCache(FailingCache):
            async def set(self, key, value, ttl=None):
                recorded[key] = ttl

        orchestrator = ShortenOrchestrator(
            store=store,
            cache=RecordingCache(None),
            logger=logger,
            cache_ttl_seconds=10 ** 9,
            clock=lambda: now,
        )

        result = await orchestrator.shorten(sample_urls[0], expiry_days=1)

        assert recorded[get_cache_key(result.link.code)] == 86400


@pytest.mark.asyncio
class TestSequentialCodes:
    """Sequential codes come from the store's id sequence."""

    async def test_codes_follow_store_ids(self, store, logger, sample_urls):
        orchestrator = ShortenOrchestrator(
            store=store, generator=ShortCodeGenerator(6, strategy="sequential"), logger=logger
        )

        first = await orchestrator.shorten(sample_urls[0])
        second = await orchestrator.shorten(sample_urls[1])

        assert first.link.code == "000001"
        assert second.link.code == "000002"

    async def test_custom_alias_on_next_id_is_skipped(self, store, logger, sample_urls):
        orchestrator = ShortenOrchestrator(
            store=store, generator=ShortCodeGenerator(6, strategy="sequential"), logger=logger
        )
        await orchestrator.shorten(sample_urls[0], custom_code="000001")

        result = await orchestrator.shorten(sample_urls[1])

        assert result.link.code == "000002"

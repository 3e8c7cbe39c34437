"""Tests that the server handles multiple concurrent connections correctly.

These tests assert that many simultaneous requests succeed, that concurrent
redirects never lose a click and that a contested custom code has exactly
one owner.
"""

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from config import Config
from web_app import create_app


@pytest.fixture
def app(service):
    """Create test FastAPI app (same as test_api)."""
    config = Config(_env_file=None, base_url="http://testserver")
    return create_app(service_instance=service, config=config)


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.mark.asyncio
class TestConcurrentConnections:
    """Prove the server handles many simultaneous requests."""

    async def test_concurrent_health_requests(self, client):
        """Many concurrent GET /api/health requests all succeed."""
        concurrency = 50
        responses = await asyncio.gather(*[client.get("/api/health") for _ in range(concurrency)])

        assert all(r.status_code == 200 for r in responses)
        assert all(r.json()["status"] == "healthy" for r in responses)

    async def test_concurrent_shorten_distinct_urls(self, client):
        """Concurrent shortens of distinct URLs get distinct codes."""
        concurrency = 30
        responses = await asyncio.gather(
            *[
                client.post("/api/shorten", json={"url": f"https://example.com/concurrent/{i}"})
                for i in range(concurrency)
            ]
        )

        assert all(r.status_code == 201 for r in responses)
        codes = {r.json()["short_code"] for r in responses}
        assert len(codes) == concurrency

    async def test_concurrent_redirects_count_every_click(self, client, service):
        create = await client.post("/api/shorten", json={"url": "https://example.com/hot"})
        short_code = create.json()["short_code"]

        concurrency = 50
        responses = await asyncio.gather(
            *[client.get(f"/{short_code}", follow_redirects=False) for _ in range(concurrency)]
        )
        await service.accountant.drain()

        assert all(r.status_code == 302 for r in responses)
        info = await client.get(f"/api/urls/{short_code}")
        assert info.json()["click_count"] == concurrency

    async def test_contested_custom_code_has_one_owner(self, client):
        concurrency = 20
        responses = await asyncio.gather(
            *[
                client.post(
                    "/api/shorten",
                    json={"url": f"https://example.com/contested/{i}", "custom_code": "contest"},
                )
                for i in range(concurrency)
            ]
        )

        statuses = sorted(r.status_code for r in responses)
        assert statuses.count(201) == 1
        assert statuses.count(409) == concurrency - 1

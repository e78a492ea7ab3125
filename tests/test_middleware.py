"""
Tests for the request ID and rate limiting middleware.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from greenthumb.config import Settings
from greenthumb.main import create_app


class TestRequestID:

    @pytest.mark.asyncio
    async def test_generated_id_echoed_in_header_and_error_body(self, test_client):
        response = await test_client.post("/users/byId", json={"userId": 1})

        rid = response.headers["X-Request-ID"]
        assert len(rid) == 8
        assert response.json()["request_id"] == rid

    @pytest.mark.asyncio
    async def test_client_supplied_id_is_kept(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_requests_over_limit_get_429(self, database, classifier):
        config = Settings(rate_limit_requests=10, rate_limit_window=60)
        app = create_app(config=config, database=database, classifier=classifier)
        transport = ASGITransport(app=app)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            statuses = [
                (await client.post("/users/byId", json={"userId": 1})).status_code
                for _ in range(11)
            ]
            limited = await client.post("/users/byId", json={"userId": 1})
            health = await client.get("/health")

        assert statuses[:10] == [404] * 10
        assert statuses[10] == 429
        assert limited.status_code == 429
        assert int(limited.headers["Retry-After"]) > 0
        assert limited.json()["error"] == "rate_limit_exceeded"
        assert health.status_code == 200

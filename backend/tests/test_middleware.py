"""
QuillMind Backend — Middleware & Health Tests
===============================================

What we test:
    ✅ Rate limiter returns 429 + Retry-After in the error envelope
    ✅ Excluded paths are never limited
    ✅ /health reports database and AI status
    ✅ Unknown routes use the error envelope
"""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from quillmind.middleware.rate_limit import RateLimitMiddleware
from quillmind.middleware.request_id import RequestIDMiddleware
from quillmind.services.gemini_service import gemini_service


def _limited_app(max_requests: int) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, max_requests=max_requests, window_seconds=60)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/ping")
    async def ping():
        return {"pong": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_blocks_after_limit(self):
        transport = ASGITransport(app=_limited_app(max_requests=2))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            assert (await client.get("/ping")).status_code == 200
            assert (await client.get("/ping")).status_code == 200
            blocked = await client.get("/ping")

        assert blocked.status_code == 429
        assert int(blocked.headers["Retry-After"]) >= 1
        body = blocked.json()
        assert body["code"] == "rate_limit_exceeded"
        assert body["request_id"] == blocked.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_health_is_never_limited(self):
        transport = ASGITransport(app=_limited_app(max_requests=1))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            statuses = [(await client.get("/health")).status_code for _ in range(5)]

        assert statuses == [200] * 5


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client, monkeypatch):
        monkeypatch.setattr(gemini_service, "health_check", AsyncMock(return_value=True))

        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["ai"] == "available"

    @pytest.mark.asyncio
    async def test_ai_down_is_degraded(self, test_client, monkeypatch):
        monkeypatch.setattr(gemini_service, "health_check", AsyncMock(return_value=False))

        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["ai"] == "unavailable"


class TestEnvelope:

    @pytest.mark.asyncio
    async def test_unknown_route_is_enveloped_404(self, test_client):
        response = await test_client.get("/api/nowhere")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"
        assert "request_id" in response.json()

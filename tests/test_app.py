"""
Showcase Backend — Application Wiring Tests
=============================================

What:  Health check, stored-file route, middleware and error envelopes.
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from showcase import database
from showcase.main import create_app
from showcase.middleware.rate_limit import RateLimitMiddleware


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy_when_database_answers(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"]

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_is_down(self, client, monkeypatch):
        broken = MagicMock()
        broken.connect.side_effect = OSError("connection refused")
        monkeypatch.setattr(database, "engine", broken)

        response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["database"] == "disconnected"


class TestFilesRoute:

    @pytest.mark.asyncio
    async def test_unknown_file_is_404(self, client):
        response = await client.get("/files/items/nothing-here.png")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_escaping_ref_is_404(self, client):
        response = await client.get("/files/..%2F..%2Fetc%2Fpasswd")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_nul_byte_in_ref_is_404(self, client):
        response = await client.get("/files/items/a%00b.png")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self, client):
        response = await client.get("/items")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_client_id_is_echoed_in_header_and_error_body(self, client):
        response = await client.get("/items/4242", headers={"X-Request-ID": "trace-me"})

        assert response.status_code == 404
        assert response.headers["X-Request-ID"] == "trace-me"
        assert response.json()["request_id"] == "trace-me"


class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_unexpected_errors_become_generic_500(self):
        app = create_app()

        @app.get("/boom")
        async def boom():
            raise RuntimeError("secret internals")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert "secret internals" not in response.text


class TestRateLimit:

    def _app(self) -> FastAPI:
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware)

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        @app.get("/health")
        async def health():
            return {"ok": True}

        return app

    @pytest.mark.asyncio
    async def test_requests_over_limit_get_429(self):
        with patch("showcase.middleware.rate_limit.settings") as mock_settings:
            mock_settings.rate_limit_requests = 2
            mock_settings.rate_limit_window = 60

            transport = ASGITransport(app=self._app())
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                statuses = [(await ac.get("/ping")).status_code for _ in range(3)]
                limited = await ac.get("/ping")
                health = await ac.get("/health")

        assert statuses == [200, 200, 429]
        assert limited.status_code == 429
        assert 0 < int(limited.headers["Retry-After"]) <= 61
        assert limited.json()["error"] == "rate_limit_exceeded"
        assert health.status_code == 200

    @pytest.mark.asyncio
    async def test_full_app_answers_429_from_middleware(self, client):
        with patch("showcase.middleware.rate_limit.settings") as mock_settings:
            mock_settings.rate_limit_requests = 1
            mock_settings.rate_limit_window = 60

            first = await client.get("/items")
            second = await client.get("/items")

        assert first.status_code == 200
        assert second.status_code == 429
        assert second.headers["Retry-After"]
        assert second.json()["details"]["retry_after"] > 0

"""
Waypoint API: HTTP Surface Tests
================================

What we test:
    ✅ Global /api prefix, with /health left unprefixed
    ✅ Security headers on every response (including 404s and preflights)
    ✅ CORS restricted to configured origins, credentials allowed
    ✅ Request ID propagation
    ✅ Rate limiting from the rate_limit namespace
    ✅ Namespace lookup through FastAPI dependencies
"""

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient

from waypoint.dependencies import config_namespace
from waypoint.middleware.security_headers import DEFAULT_SECURITY_HEADERS

# Second entry of CORS_ORIGINS in the valid_env fixture
ALLOWED_ORIGIN = "https://app.waypoint.dev"


class TestRoutePrefix:

    @pytest.mark.asyncio
    async def test_health_is_unprefixed(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["environment"] == "test"
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_health_not_under_prefix(self, test_client):
        response = await test_client.get("/api/health")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_info_is_prefixed(self, test_client):
        response = await test_client.get("/api/info")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Waypoint API"
        assert body["environment"] == "test"
        assert "database" in body["namespaces"]

    @pytest.mark.asyncio
    async def test_info_not_served_unprefixed(self, test_client):
        response = await test_client.get("/info")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_openapi_under_prefix(self, test_client):
        response = await test_client.get("/api/openapi.json")
        assert response.status_code == 200
        assert "/api/info" in response.json()["paths"]


class TestSecurityHeaders:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/health", "/api/info", "/does-not-exist"])
    async def test_headers_on_every_response(self, test_client, path):
        response = await test_client.get(path)

        for name, value in DEFAULT_SECURITY_HEADERS.items():
            assert response.headers[name] == value

    @pytest.mark.asyncio
    async def test_nosniff_and_frame_options(self, test_client):
        response = await test_client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"


class TestCors:

    @pytest.mark.asyncio
    async def test_allowed_origin_echoed_with_credentials(self, test_client):
        response = await test_client.get("/api/info", headers={"Origin": ALLOWED_ORIGIN})

        assert response.headers["access-control-allow-origin"] == ALLOWED_ORIGIN
        assert response.headers["access-control-allow-credentials"] == "true"

    @pytest.mark.asyncio
    async def test_unlisted_origin_not_allowed(self, test_client):
        response = await test_client.get(
            "/api/info", headers={"Origin": "https://evil.example.com"}
        )
        assert "access-control-allow-origin" not in response.headers

    @pytest.mark.asyncio
    async def test_preflight_for_allowed_origin(self, test_client):
        response = await test_client.options(
            "/api/info",
            headers={
                "Origin": ALLOWED_ORIGIN,
                "Access-Control-Request-Method": "GET",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == ALLOWED_ORIGIN
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    @pytest.mark.asyncio
    async def test_preflight_for_unlisted_origin_rejected(self, test_client):
        response = await test_client.options(
            "/api/info",
            headers={
                "Origin": "https://evil.example.com",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_origin_list_allows_nothing(self, make_app):
        app = make_app(CORS_ORIGINS="")
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get(
                "/api/info", headers={"Origin": "http://localhost:3001"}
            )
        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self, test_client):
        response = await test_client.get("/api/info")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_client_value_echoed(self, test_client):
        response = await test_client.get("/api/info", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_limit_enforced_per_window(self, make_app):
        app = make_app(THROTTLE_LIMIT="2", THROTTLE_TTL="60000")
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            first = await client.get("/api/info")
            second = await client.get("/api/info")
            third = await client.get("/api/info")

        assert first.status_code == 200
        assert second.status_code == 200
        assert third.status_code == 429
        assert 1 <= int(third.headers["Retry-After"]) <= 60
        assert third.json()["error"] == "rate_limit_exceeded"
        assert third.headers["X-Content-Type-Options"] == "nosniff"

    @pytest.mark.asyncio
    async def test_health_never_limited(self, make_app):
        app = make_app(THROTTLE_LIMIT="1")
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            responses = [await client.get("/health") for _ in range(5)]

        assert all(r.status_code == 200 for r in responses)


class TestNamespaceDependencies:

    @pytest.mark.asyncio
    async def test_route_receives_namespace_by_name(self, app, valid_env):
        @app.get("/api/test-database")
        async def read_database(database=Depends(config_namespace("database"))):
            return {"url": database.url, "direct_url": database.direct_url}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/test-database")

        assert response.status_code == 200
        assert response.json() == {
            "url": valid_env["DATABASE_URL"],
            "direct_url": valid_env["DATABASE_URL_DIRECT"],
        }

    @pytest.mark.asyncio
    async def test_unknown_namespace_is_404(self, app):
        @app.get("/api/test-unknown")
        async def read_unknown(record=Depends(config_namespace("payments"))):
            return {}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/test-unknown")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert "payments" in response.json()["message"]

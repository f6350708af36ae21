"""
Tests for health and root endpoints
"""
from httpx import AsyncClient


async def test_root(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["health"] == "/health"


async def test_health(client: AsyncClient):
    response = await client.get("/health")

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "healthy"
    assert body["database"]["connection"] == "ok"


async def test_api_health_ready(client: AsyncClient):
    response = await client.get("/api/v1/health/ready")

    assert response.status_code == 200
    assert response.json()["database"]["status"] == "healthy"


async def test_security_headers(client: AsyncClient):
    response = await client.get("/")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Request-ID" in response.headers


async def test_unknown_route_envelope(client: AsyncClient):
    response = await client.get("/api/v1/does-not-exist")

    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["error"]["code"] == "HTTP_404"


async def test_oversized_body_rejected(client: AsyncClient):
    response = await client.post(
        "/api/v1/auth/login",
        content=b"x" * (1024 * 1024 + 1),
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 413
    assert response.json()["error"]["code"] == "REQUEST_TOO_LARGE"


async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/", headers={"X-Request-ID": "abc12345"})

    assert response.headers["X-Request-ID"] == "abc12345"

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_place_resolver
from app.main import create_app
from app.middleware import rate_limit
from app.services.geocode import PlaceNotFound


@pytest.mark.asyncio
async def test_cors_allowed_origin(monkeypatch):
    monkeypatch.setenv("ALLOW_ORIGINS", "http://localhost:3000,https://example.com")
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/health", headers={"Origin": "http://localhost:3000"})
        # When allowed, Starlette adds ACAO echoing the origin
        assert r.status_code == 200
        assert r.headers.get("access-control-allow-origin") == "http://localhost:3000"


@pytest.mark.asyncio
async def test_cors_disallowed_origin(monkeypatch):
    monkeypatch.setenv("ALLOW_ORIGINS", "https://example.com")
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/health", headers={"Origin": "http://evil.com"})
        assert r.status_code == 200
        assert r.headers.get("access-control-allow-origin") is None


@pytest.mark.asyncio
async def test_security_headers_present(app_client):
    r = await app_client.get("/healthz")
    assert r.headers.get("x-content-type-options") == "nosniff"
    assert r.headers.get("cache-control") == "no-store"
    assert r.headers.get("referrer-policy") == "no-referrer"


@pytest.mark.asyncio
async def test_rate_limit_get_exceeded(app_client, monkeypatch):
    # Ensure limiter is enabled during tests
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "1")

    # Hit limit for GET: 60/minute, 61st must be 429
    for _ in range(60):
        r = await app_client.get("/feed")
        assert r.status_code == 200
    r = await app_client.get("/feed")
    assert r.status_code == 429
    body = r.json()
    assert body["error"]["code"] == "RATE_LIMITED"
    assert int(r.headers["Retry-After"]) >= 1


@pytest.mark.asyncio
async def test_probes_are_never_throttled(app_client, monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "1")
    for _ in range(70):
        r = await app_client.get("/healthz")
        assert r.status_code == 200


class _NoPlaces:
    async def resolve(self, query):
        return PlaceNotFound()


@pytest.mark.asyncio
async def test_place_lookups_have_their_own_limit(engine, monkeypatch):
    monkeypatch.setattr(rate_limit.limiter, "enabled", True)
    app = create_app()
    app.dependency_overrides[get_place_resolver] = _NoPlaces
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        for _ in range(20):
            r = await ac.post("/places/resolve", json={"q": "Atlantis"})
            assert r.status_code == 200
        r = await ac.post("/places/resolve", json={"q": "Atlantis"})
        assert r.status_code == 429
        assert r.json()["error"]["code"] == "RATE_LIMITED"

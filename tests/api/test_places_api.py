import httpx
import pytest
from httpx import AsyncClient

from app import db
from app.api.deps import get_place_resolver
from app.infra import background
from app.infra.unit_of_work import SqlAlchemyUnitOfWork
from app.main import create_app
from app.services.geocode import NominatimGeocoder, PlaceResolver

NOMINATIM_URL = "https://nominatim.test/search"


class Nominatim:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload if payload is not None else []
        self.status_code = status_code
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
async def places_client(engine):
    provider = Nominatim()

    def resolver():
        return PlaceResolver(
            lambda: SqlAlchemyUnitOfWork(db.SessionLocal),
            geocoder=NominatimGeocoder(url=NOMINATIM_URL, user_agent="confess-tests"),
            client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(provider)),
        )

    app = create_app()
    app.dependency_overrides[get_place_resolver] = resolver
    async with AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac, provider


@pytest.mark.asyncio
async def test_resolve_then_serve_from_cache(places_client):
    ac, provider = places_client
    provider.payload = [{"lat": "59.9133", "lon": "10.7389", "display_name": "Oslo, Norway"}]

    r1 = await ac.post("/places/resolve", json={"q": "Oslo"})
    assert r1.status_code == 200
    assert r1.json() == {
        "ok": True,
        "lat": 59.9133,
        "lng": 10.7389,
        "name": "Oslo",
        "source": "provider",
    }

    await background.drain()

    r2 = await ac.post("/places/resolve", json={"q": "  oslo "})
    assert r2.status_code == 200
    assert r2.json()["source"] == "cache"
    assert provider.calls == 1


@pytest.mark.asyncio
async def test_zero_results_is_not_found(places_client):
    ac, _ = places_client
    r = await ac.post("/places/resolve", json={"q": "Atlantis"})
    assert r.status_code == 200
    assert r.json() == {"ok": False, "reason": "NOT_FOUND"}


@pytest.mark.asyncio
async def test_provider_failure_is_502(places_client):
    ac, provider = places_client
    provider.status_code = 503
    r = await ac.post("/places/resolve", json={"q": "Oslo"})
    assert r.status_code == 502
    assert r.json()["error"]["code"] == "GEOCODER_UNAVAILABLE"


@pytest.mark.asyncio
@pytest.mark.parametrize("q", [None, "", "a", " b ", "x" * 81])
async def test_query_bounds(places_client, q):
    ac, provider = places_client
    r = await ac.post("/places/resolve", json={"q": q})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_QUERY"
    assert provider.calls == 0

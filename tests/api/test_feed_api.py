from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.models import Confession
from app.utils.datetime import utcnow


async def _seed(session, count, *, lat=None, lng=None, prefix="c"):
    now = utcnow()
    session.add_all(
        [
            Confession(
                id=f"{prefix}-{i:04d}",
                text=f"{prefix} {i}",
                lat=lat,
                lng=lng,
                created_at=now - timedelta(seconds=i),
                expires_at=now - timedelta(seconds=i) + timedelta(hours=24),
            )
            for i in range(count)
        ]
    )
    await session.commit()


@pytest.mark.asyncio
async def test_world_feed_pages_with_cursor(app_client: AsyncClient, session):
    await _seed(session, 25)

    r1 = await app_client.get("/feed", params={"mode": "world", "limit": 10})
    assert r1.status_code == 200
    p1 = r1.json()
    assert len(p1["rows"]) == 10
    assert p1["has_more"] is True
    assert p1["rows"][0]["text"] == "c 0"
    cursor = p1["next_cursor"]
    assert cursor["id"] == p1["rows"][-1]["id"]

    seen = [row["id"] for row in p1["rows"]]
    while cursor:
        r = await app_client.get(
            "/feed",
            params={
                "limit": 10,
                "cursor_created_at": cursor["created_at"],
                "cursor_id": cursor["id"],
            },
        )
        assert r.status_code == 200
        page = r.json()
        seen.extend(row["id"] for row in page["rows"])
        cursor = page["next_cursor"]
        if not page["has_more"]:
            assert cursor is None

    assert len(seen) == 25
    assert len(set(seen)) == 25


@pytest.mark.asyncio
async def test_limit_is_clamped(app_client: AsyncClient, session):
    await _seed(session, 60)

    small = (await app_client.get("/feed", params={"limit": 1})).json()
    large = (await app_client.get("/feed", params={"limit": 500})).json()
    default = (await app_client.get("/feed")).json()

    assert len(small["rows"]) == 10
    assert len(large["rows"]) == 50
    assert len(default["rows"]) == 30


@pytest.mark.asyncio
async def test_near_feed_filters_by_radius(app_client: AsyncClient, session):
    await _seed(session, 3, lat=59.9139, lng=10.7522, prefix="oslo")
    await _seed(session, 2, lat=60.3913, lng=5.3221, prefix="bergen")
    await _seed(session, 2, prefix="nowhere")

    r = await app_client.get(
        "/feed", params={"mode": "near", "lat": 59.91, "lng": 10.75, "radius_m": 5000}
    )
    assert r.status_code == 200
    texts = {row["text"] for row in r.json()["rows"]}
    assert texts == {"oslo 0", "oslo 1", "oslo 2"}


@pytest.mark.asyncio
async def test_near_without_coordinates_is_422(app_client: AsyncClient):
    r = await app_client.get("/feed", params={"mode": "near"})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "COORDINATES_REQUIRED"


@pytest.mark.asyncio
async def test_unknown_mode_is_422(app_client: AsyncClient):
    r = await app_client.get("/feed", params={"mode": "galaxy"})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "INVALID_MODE"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"cursor_id": "abc"},
        {"cursor_created_at": "2026-10-01T12:00:00+00:00"},
        {"cursor_created_at": "yesterday", "cursor_id": "abc"},
    ],
)
async def test_malformed_cursor_is_422(app_client: AsyncClient, params):
    r = await app_client.get("/feed", params=params)
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "INVALID_CURSOR"


@pytest.mark.asyncio
async def test_out_of_range_latitude_is_422(app_client: AsyncClient):
    r = await app_client.get("/feed", params={"mode": "near", "lat": 91, "lng": 0})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_cursor_accepts_space_separated_timestamps(app_client: AsyncClient, session):
    await _seed(session, 15)

    first = (await app_client.get("/feed", params={"limit": 10})).json()
    cursor = first["next_cursor"]
    stamp = cursor["created_at"]
    assert stamp.endswith("+00:00")
    naive = stamp[: -len("+00:00")]

    variants = [
        stamp,
        stamp.replace("+00:00", " 00:00"),
        naive.replace("T", " "),
        naive.replace("T", " ") + " 00:00",
    ]
    pages = []
    for created_at in variants:
        r = await app_client.get(
            "/feed",
            params={"limit": 10, "cursor_created_at": created_at, "cursor_id": cursor["id"]},
        )
        assert r.status_code == 200, created_at
        pages.append([row["id"] for row in r.json()["rows"]])

    assert len(pages[0]) == 5
    assert all(ids == pages[0] for ids in pages)

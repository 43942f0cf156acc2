import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.infra import background
from app.models import EventLog


@pytest.mark.asyncio
async def test_event_is_accepted_and_recorded(app_client: AsyncClient, session):
    r = await app_client.post(
        "/events",
        json={"event_name": "feed_view", "mode": "near", "session_hash": "abc123"},
    )
    assert r.status_code == 202
    assert r.json() == {"accepted": True}

    await background.drain()

    rows = (await session.execute(select(EventLog))).scalars().all()
    assert len(rows) == 1
    ev = rows[0]
    assert ev.event_name == "feed_view"
    assert ev.mode == "near"
    assert ev.session_hash == "abc123"
    assert ev.day_bucket == ev.created_at.date()
    assert ev.time_bucket == ev.created_at.hour


@pytest.mark.asyncio
async def test_posting_records_outcome_events(app_client: AsyncClient, session):
    await app_client.post("/confessions", json={"text": "one"}, headers={"X-Actor-Id": "d"})
    await app_client.post("/confessions", json={"text": "two"}, headers={"X-Actor-Id": "d"})
    await app_client.post("/confessions", json={"text": "a@b"}, headers={"X-Actor-Id": "e"})
    await background.drain()

    rows = (await session.execute(select(EventLog))).scalars().all()
    summary = sorted((ev.event_name, ev.reason_bucket) for ev in rows)
    assert summary == [
        ("post_reject", "rate_limit"),
        ("post_reject", "validation"),
        ("post_success", None),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"event_name": "Feed View"},
        {"event_name": ""},
        {"event_name": "feed_view", "mode": "galaxy"},
        {"event_name": "feed_view", "reason_bucket": "because"},
        {"event_name": "feed_view", "session_hash": "x" * 65},
    ],
)
async def test_invalid_events_are_422(app_client: AsyncClient, payload):
    r = await app_client.post("/events", json=payload)
    assert r.status_code == 422

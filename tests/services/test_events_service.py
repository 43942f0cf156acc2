from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy import select

from app.infra import background
from app.models import EventLog
from app.services import events


@pytest.mark.asyncio
async def test_record_event_buckets_by_day_and_hour(session_factory, session):
    ts = datetime(2026, 10, 1, 23, 45, 10)

    await events.record_event(
        session_factory, "feed_view", mode="world", session_hash="h1", now=ts
    )

    ev = (await session.execute(select(EventLog))).scalar_one()
    assert ev.day_bucket == date(2026, 10, 1)
    assert ev.time_bucket == 23
    assert ev.mode == "world"
    assert ev.session_hash == "h1"
    assert ev.reason_bucket is None


@pytest.mark.asyncio
async def test_emit_returns_before_the_write(session_factory, session):
    events.emit("post_reject", reason_bucket="network", session_factory=session_factory)

    assert background.pending() >= 1
    await background.drain()

    ev = (await session.execute(select(EventLog))).scalar_one()
    assert ev.event_name == "post_reject"
    assert ev.reason_bucket == "network"

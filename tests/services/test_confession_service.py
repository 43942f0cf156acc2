from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from app.core.exceptions import AdmissionError, NotFoundError, RateLimitError, ValidationError
from app.models import ActorCooldown, Confession
from app.services.confessions import CONFESSION_TTL, ConfessionService

T0 = datetime(2026, 10, 1, 12, 0, 0)


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingSink:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def __call__(self, event_name: str, **fields) -> None:
        self.events.append((event_name, fields))


@pytest.fixture
def clock():
    return Clock(T0)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def service(uow_factory, clock, sink):
    return ConfessionService(uow_factory, clock=clock, event_sink=sink)


@pytest.mark.asyncio
async def test_submit_stores_row_with_server_timestamps(service, session, sink):
    row = await service.submit(text="  meet me at noon ", actor_id="device-1")

    assert row.text == "meet me at noon"
    assert row.created_at == T0
    assert row.expires_at == T0 + CONFESSION_TTL
    assert row.lat is None and row.lng is None

    stored = (await session.execute(select(Confession))).scalars().one()
    assert stored.id == row.id
    assert stored.hidden is False
    assert sink.events == [("post_success", {"mode": "world"})]


@pytest.mark.asyncio
async def test_submit_with_coordinates(service):
    row = await service.submit(text="by the river", actor_id="device-1", lat=59.9, lng=10.7)
    assert (row.lat, row.lng) == (59.9, 10.7)


@pytest.mark.asyncio
async def test_place_label_is_not_persisted(service, session):
    await service.submit(text="hello", actor_id="device-1", place_label="Somewhere nice")
    stored = (await session.execute(select(Confession))).scalars().one()
    assert not hasattr(stored, "place_label")


@pytest.mark.asyncio
@pytest.mark.parametrize("lat,lng", [(10.0, None), (None, 10.0), (91.0, 0.0), (0.0, -181.0)])
async def test_invalid_coordinates_rejected(service, session, lat, lng):
    with pytest.raises(ValidationError) as excinfo:
        await service.submit(text="hello", actor_id="device-1", lat=lat, lng=lng)
    assert excinfo.value.code == "INVALID_COORDINATES"
    assert (await session.execute(select(Confession))).first() is None


@pytest.mark.asyncio
async def test_rejected_text_writes_nothing(service, session, sink):
    with pytest.raises(AdmissionError) as excinfo:
        await service.submit(text="contact@x.com", actor_id="device-1")
    assert excinfo.value.code == "CONTENT_BLOCKED"
    assert (await session.execute(select(Confession))).first() is None
    # A refused text does not start the cooldown
    assert (await session.execute(select(ActorCooldown))).first() is None
    assert sink.events == [("post_reject", {"reason_bucket": "validation"})]


@pytest.mark.asyncio
async def test_second_post_inside_cooldown_is_rate_limited(service, clock, sink):
    await service.submit(text="first", actor_id="device-1")
    clock.advance(seconds=5)

    with pytest.raises(RateLimitError) as excinfo:
        await service.submit(text="second", actor_id="device-1")

    assert excinfo.value.code == "RATE_LIMIT"
    assert excinfo.value.retry_after_seconds == 10
    assert sink.events[-1] == ("post_reject", {"reason_bucket": "rate_limit"})


@pytest.mark.asyncio
async def test_post_allowed_once_cooldown_elapsed(service, clock, session):
    await service.submit(text="first", actor_id="device-1")
    clock.advance(seconds=14, microseconds=999_999)
    with pytest.raises(RateLimitError):
        await service.submit(text="too soon", actor_id="device-1")

    clock.advance(microseconds=1)
    await service.submit(text="second", actor_id="device-1")

    rows = (await session.execute(select(Confession.text))).scalars().all()
    assert sorted(rows) == ["first", "second"]


@pytest.mark.asyncio
async def test_cooldown_is_per_actor(service):
    await service.submit(text="first", actor_id="device-1")
    await service.submit(text="other device", actor_id="device-2")


@pytest.mark.asyncio
async def test_concurrent_submits_from_one_actor_insert_once(service, session):
    results = await asyncio.gather(
        *(service.submit(text=f"post {i}", actor_id="device-1") for i in range(5)),
        return_exceptions=True,
    )

    accepted = [r for r in results if not isinstance(r, BaseException)]
    limited = [r for r in results if isinstance(r, RateLimitError)]
    assert len(accepted) == 1
    assert len(limited) == 4
    count = len((await session.execute(select(Confession.id))).all())
    assert count == 1


@pytest.mark.asyncio
async def test_hide_marks_row_hidden(service, session):
    row = await service.submit(text="hide me", actor_id="device-1")
    await service.hide(row.id)

    stored = await session.get(Confession, row.id)
    assert stored.hidden is True


@pytest.mark.asyncio
async def test_hide_unknown_id_raises_not_found(service):
    with pytest.raises(NotFoundError):
        await service.hide("00000000-0000-0000-0000-000000000000")

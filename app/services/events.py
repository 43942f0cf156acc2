"""Anonymous analytics events.

Events are bucketed by day and hour; they carry no actor id, IP or text. Writes are
fire-and-forget: :func:`emit` schedules the insert on its own session and returns
immediately.
"""

from __future__ import annotations

from datetime import datetime
from typing import Final

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app import db
from app.infra import background
from app.models.event_log import EventLog
from app.utils.datetime import utcnow

logger = structlog.get_logger(__name__)

REASON_BUCKETS: Final[frozenset[str]] = frozenset({"validation", "rate_limit", "network"})


async def record_event(
    session_factory: async_sessionmaker[AsyncSession],
    event_name: str,
    *,
    mode: str | None = None,
    reason_bucket: str | None = None,
    session_hash: str | None = None,
    now: datetime | None = None,
) -> None:
    ts = now or utcnow()
    async with session_factory() as session:
        session.add(
            EventLog(
                event_name=event_name,
                created_at=ts,
                day_bucket=ts.date(),
                time_bucket=ts.hour,
                mode=mode,
                reason_bucket=reason_bucket,
                session_hash=session_hash,
            )
        )
        await session.commit()


def emit(
    event_name: str,
    *,
    mode: str | None = None,
    reason_bucket: str | None = None,
    session_hash: str | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> None:
    """Schedule :func:`record_event` in the background."""

    background.spawn(
        record_event(
            session_factory or db.SessionLocal,
            event_name,
            mode=mode,
            reason_bucket=reason_bucket,
            session_hash=session_hash,
        ),
        name=f"event:{event_name}",
    )
    logger.debug("event_emitted", event_name=event_name, mode=mode, reason_bucket=reason_bucket)

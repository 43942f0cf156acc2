# app/utils/datetime.py
from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Current time as naive UTC (the storage convention for every DateTime column)."""
    return datetime.now(UTC).replace(tzinfo=None)


def as_utc_naive(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is not None:
        # normalize to UTC, then drop tzinfo (DB columns are naive)
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def as_utc_aware(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_iso(s: str | None) -> datetime | None:
    """Parse an ISO-8601 string (``Z`` suffix accepted) into naive UTC.

    Microseconds are preserved: keyset cursors compare on exact equality.
    """
    if not s:
        return None
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    return as_utc_naive(dt)

"""Repository abstractions for the service layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class ConfessionRow:
    """The columns of a confession that may be shown to any client."""

    id: str
    text: str
    created_at: datetime
    expires_at: datetime
    lat: float | None
    lng: float | None


@dataclass(frozen=True)
class FeedCursor:
    """Last-seen row under the ``(created_at DESC, id DESC)`` ordering."""

    created_at: datetime
    id: str


@dataclass(frozen=True)
class NearFilter:
    lat: float
    lng: float
    radius_m: int


@dataclass(frozen=True)
class ReportRow:
    id: int
    confession_id: str
    reason: str
    details: str | None
    status: str
    created_at: datetime


@dataclass(frozen=True)
class PlaceCacheRow:
    q: str
    lat: float
    lng: float
    name: str
    provider: str


class ConfessionRepository(Protocol):
    """Write and read boundary for confessions."""

    async def claim_post_slot(self, actor_id: str, *, now: datetime, cutoff: datetime) -> bool: ...

    async def last_posted_at(self, actor_id: str) -> datetime | None: ...

    async def insert(
        self,
        *,
        text: str,
        lat: float | None,
        lng: float | None,
        created_at: datetime,
        expires_at: datetime,
        actor_id: str | None,
    ) -> ConfessionRow: ...

    async def query_feed(
        self,
        *,
        now: datetime,
        limit: int,
        cursor: FeedCursor | None,
        near: NearFilter | None,
    ) -> list[ConfessionRow]: ...

    async def get_visible(self, confession_id: str, *, now: datetime) -> ConfessionRow | None: ...

    async def hide(self, confession_id: str) -> bool: ...

    async def delete_created_before(self, cutoff: datetime) -> int: ...

    async def clear_cooldowns_before(self, cutoff: datetime) -> int: ...


class ReportRepository(Protocol):
    async def create(
        self, *, confession_id: str, reason: str, details: str | None, created_at: datetime
    ) -> ReportRow: ...

    async def list_by_status_keyset(
        self, *, status: str, limit: int, cursor: tuple[datetime, int] | None
    ) -> tuple[list[ReportRow], tuple[datetime, int] | None]: ...

    async def resolve(self, report_id: int) -> ReportRow | None: ...


class PlaceCacheRepository(Protocol):
    async def get(self, q_lower: str) -> PlaceCacheRow | None: ...

    async def add(
        self,
        *,
        q: str,
        q_lower: str,
        lat: float,
        lng: float,
        name: str,
        provider: str,
        created_at: datetime,
    ) -> None: ...

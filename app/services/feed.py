"""Feed query engine: world / near modes with keyset pagination."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Final

import structlog

from app.core.exceptions import FeedQueryError
from app.infra.unit_of_work import UnitOfWork
from app.repositories.interfaces import ConfessionRow, FeedCursor, NearFilter
from app.utils.datetime import utcnow

DEFAULT_PAGE_SIZE: Final[int] = 30
MIN_PAGE_SIZE: Final[int] = 10
MAX_PAGE_SIZE: Final[int] = 50

DEFAULT_RADIUS_M: Final[int] = 10_000
MIN_RADIUS_M: Final[int] = 100
MAX_RADIUS_M: Final[int] = 50_000

UnitOfWorkFactory = Callable[[], UnitOfWork]

logger = structlog.get_logger(__name__)


class FeedMode(str, Enum):
    world = "world"
    near = "near"


@dataclass(frozen=True)
class FeedPage:
    rows: list[ConfessionRow]
    next_cursor: FeedCursor | None
    has_more: bool


def clamp_page_size(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_PAGE_SIZE
    return max(MIN_PAGE_SIZE, min(MAX_PAGE_SIZE, int(limit)))


def clamp_radius_m(radius_m: int | None) -> int:
    if radius_m is None:
        return DEFAULT_RADIUS_M
    return max(MIN_RADIUS_M, min(MAX_RADIUS_M, int(radius_m)))


class FeedService:
    def __init__(
        self, uow_factory: UnitOfWorkFactory, *, clock: Callable[[], datetime] = utcnow
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    async def fetch(
        self,
        *,
        mode: FeedMode | str,
        limit: int | None = None,
        cursor: FeedCursor | None = None,
        lat: float | None = None,
        lng: float | None = None,
        radius_m: int | None = None,
    ) -> FeedPage:
        """Return one page ordered by ``(created_at DESC, id DESC)``.

        Expired and hidden confessions are never returned. ``near`` mode only
        considers geotagged confessions within ``radius_m`` of ``(lat, lng)``.
        """

        try:
            mode = FeedMode(mode)
        except ValueError:
            raise FeedQueryError(f"unknown feed mode: {mode}", code="INVALID_MODE") from None

        page_size = clamp_page_size(limit)
        near: NearFilter | None = None
        if mode is FeedMode.near:
            if lat is None or lng is None:
                raise FeedQueryError(
                    "lat and lng are required for near mode", code="COORDINATES_REQUIRED"
                )
            near = NearFilter(lat=float(lat), lng=float(lng), radius_m=clamp_radius_m(radius_m))

        async with self._uow_factory() as uow:
            # One extra row tells whether another page exists
            rows = await uow.confessions.query_feed(
                now=self._clock(), limit=page_size + 1, cursor=cursor, near=near
            )

        has_more = len(rows) > page_size
        page_rows = rows[:page_size]
        next_cursor = None
        if has_more:
            last = page_rows[-1]
            next_cursor = FeedCursor(created_at=last.created_at, id=last.id)

        logger.info(
            "feed_page",
            mode=mode.value,
            page_size=page_size,
            radius_m=near.radius_m if near else None,
            returned=len(page_rows),
            has_more=has_more,
            first_page=cursor is None,
        )
        return FeedPage(rows=page_rows, next_cursor=next_cursor, has_more=has_more)

"""Paging over one feed result set, plus the auto-expanding "near me" search."""

from __future__ import annotations

from collections.abc import Callable
from typing import Final

import structlog

from app.client.api import EMPTY_PAGE, Confession, ConfessClient, Cursor, FeedPage

logger = structlog.get_logger(__name__)

NEAR_ME_RADII: Final[tuple[int, ...]] = (100, 250, 500, 1000, 2000)
MIN_RESULTS: Final[int] = 10
MAX_ATTEMPTS: Final[int] = 3
PLACE_RADIUS_M: Final[int] = 10_000


class FeedPager:
    """Accumulates the pages of a single query.

    The query parameters are fixed at construction; ``load_more`` always continues
    with the same mode, coordinates and radius as the first page.
    """

    def __init__(
        self,
        client: ConfessClient,
        mode: str = "world",
        *,
        lat: float | None = None,
        lng: float | None = None,
        radius_m: int | None = None,
        on_load_more: Callable[[], object] | None = None,
    ) -> None:
        self._client = client
        self._on_load_more = on_load_more
        self.mode = mode
        self.lat = lat
        self.lng = lng
        self.radius_m = radius_m
        self.rows: list[Confession] = []
        self.cursor: Cursor | None = None
        self.has_more = False

    def _reset(self, page: FeedPage) -> None:
        self.rows = list(page.rows)
        self.cursor = page.next_cursor
        self.has_more = page.has_more

    async def _fetch(self, cursor: Cursor | None, radius_m: int | None = None) -> FeedPage:
        return await self._client.fetch_feed(
            self.mode,
            cursor=cursor,
            lat=self.lat,
            lng=self.lng,
            radius_m=radius_m if radius_m is not None else self.radius_m,
        )

    async def load_first(self) -> FeedPage:
        page = await self._fetch(None)
        self._reset(page)
        return page

    async def load_more(self) -> FeedPage:
        """Fetch the next page; an exhausted pager returns an empty page without a request."""
        if not self.has_more or self.cursor is None:
            return EMPTY_PAGE
        page = await self._fetch(self.cursor)
        if page.failed:
            # Keep the cursor so the user can retry the same page
            return page
        self.rows.extend(page.rows)
        self.cursor = page.next_cursor
        self.has_more = page.has_more
        if self._on_load_more is not None:
            self._on_load_more()
        return page


class NearMePager(FeedPager):
    """``near`` feed that widens its radius on the first page until it finds enough posts.

    Radii are tried in order, at most ``max_attempts`` of them, stopping at the first
    one that returns ``min_results`` rows. The radius finally used is kept for every
    following page.
    """

    def __init__(
        self,
        client: ConfessClient,
        *,
        lat: float,
        lng: float,
        radii: tuple[int, ...] = NEAR_ME_RADII,
        min_results: int = MIN_RESULTS,
        max_attempts: int = MAX_ATTEMPTS,
        on_load_more: Callable[[], object] | None = None,
    ) -> None:
        super().__init__(
            client, "near", lat=lat, lng=lng, radius_m=radii[0], on_load_more=on_load_more
        )
        self._radii = radii
        self._min_results = min_results
        self._max_attempts = max_attempts
        self.attempts = 0

    async def load_first(self) -> FeedPage:
        page = EMPTY_PAGE
        self.attempts = 0
        for radius in self._radii[: self._max_attempts]:
            self.attempts += 1
            self.radius_m = radius
            page = await self._fetch(None, radius)
            if page.failed or len(page.rows) >= self._min_results:
                break
        logger.info(
            "near_me_radius_selected",
            radius_m=self.radius_m,
            attempts=self.attempts,
            returned=len(page.rows),
        )
        self._reset(page)
        return page

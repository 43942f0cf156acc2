"""The two location-scoped flows: "near me" and "somewhere".

The device location (from ``locate``) and the searched place are tracked in
separate attributes; resolving a place never overwrites the device location and
the near-me flow never reads the searched place.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog

from app.client.api import ConfessClient, PlaceFound, PlaceMissing
from app.client.feed import PLACE_RADIUS_M, FeedPager, NearMePager
from app.client.places import NamedPlace, PlaceMemo
from app.client.session import PageFetched, SessionStore

logger = structlog.get_logger(__name__)

MIN_QUERY_LENGTH = 2

NOT_FOUND_NOTICE = "Could not find that place, listening near you instead."
LOOKUP_ERROR_MESSAGE = "Could not resolve that place right now."
LOCATION_ERROR_MESSAGE = "Location is unavailable."


@dataclass(frozen=True)
class Location:
    lat: float
    lng: float


Locate = Callable[[], Awaitable[Location | None]]


@dataclass(frozen=True)
class ListenOutcome:
    pager: FeedPager | None = None
    place: NamedPlace | None = None
    notice: str | None = None
    error: str | None = None


class Listener:
    def __init__(
        self,
        client: ConfessClient,
        *,
        locate: Locate,
        memo: PlaceMemo | None = None,
        session: SessionStore | None = None,
    ) -> None:
        self._client = client
        self._locate = locate
        self._session = session
        self.memo = memo if memo is not None else PlaceMemo()
        self.device_location: Location | None = None
        self.place: NamedPlace | None = None

    def _count_fetch(self) -> None:
        # Only "load more" counts towards the ad; first pages do not
        if self._session is not None:
            self._session.dispatch(PageFetched())

    async def world(self) -> ListenOutcome:
        pager = FeedPager(self._client, "world", on_load_more=self._count_fetch)
        await pager.load_first()
        return ListenOutcome(pager=pager)

    async def near_me(self) -> ListenOutcome:
        location = await self._locate()
        if location is None:
            return ListenOutcome(error=LOCATION_ERROR_MESSAGE)
        self.device_location = location
        pager = NearMePager(
            self._client,
            lat=location.lat,
            lng=location.lng,
            on_load_more=self._count_fetch,
        )
        await pager.load_first()
        return ListenOutcome(pager=pager)

    async def somewhere(self, query: str) -> ListenOutcome:
        q = query.strip()
        cached = self.memo.get(q)
        if cached is not None:
            return await self._listen_at(cached)
        if len(q) < MIN_QUERY_LENGTH:
            return ListenOutcome()

        result = await self._client.resolve_place(q)
        if isinstance(result, PlaceFound):
            place = NamedPlace(query=q, name=result.name, lat=result.lat, lng=result.lng)
            self.memo.put(place)
            return await self._listen_at(place)
        if isinstance(result, PlaceMissing):
            logger.info("place_not_found_fallback")
            outcome = await self.near_me()
            if outcome.error:
                return outcome
            return ListenOutcome(pager=outcome.pager, notice=NOT_FOUND_NOTICE)
        # Lookup errors do not fall back: the user retries
        return ListenOutcome(error=LOOKUP_ERROR_MESSAGE)

    async def _listen_at(self, place: NamedPlace) -> ListenOutcome:
        self.place = place
        pager = FeedPager(
            self._client,
            "near",
            lat=place.lat,
            lng=place.lng,
            radius_m=PLACE_RADIUS_M,
            on_load_more=self._count_fetch,
        )
        await pager.load_first()
        return ListenOutcome(pager=pager, place=place)

"""Place resolution: free-text place query -> coordinates, with a durable cache.

Lookups hit the ``place_cache`` table first and fall back to the external geocoder
(Nominatim). A successful provider lookup is written back to the cache in the
background; losing a write race to an identical query is expected and ignored.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final, Literal

import httpx
import structlog
from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.exceptions import GeocoderError, ValidationError
from app.infra import background
from app.infra.unit_of_work import UnitOfWork
from app.utils.datetime import utcnow

logger = structlog.get_logger(__name__)

MIN_QUERY_LENGTH: Final[int] = 2
MAX_QUERY_LENGTH: Final[int] = 80

UnitOfWorkFactory = Callable[[], UnitOfWork]
ClientFactory = Callable[[], httpx.AsyncClient]


@dataclass(frozen=True)
class ResolvedPlace:
    lat: float
    lng: float
    name: str
    source: Literal["cache", "provider"]
    ok: Literal[True] = True


@dataclass(frozen=True)
class PlaceNotFound:
    """The provider answered, but knows no such place. Not an error."""

    ok: Literal[False] = False
    reason: Literal["NOT_FOUND"] = "NOT_FOUND"


PlaceResolution = ResolvedPlace | PlaceNotFound


@dataclass(frozen=True)
class GeocodeHit:
    lat: float
    lng: float
    name: str


def normalize_query(query: str) -> str:
    """Cache key for a place query."""
    return query.strip().lower()


def _display_name(first: dict[str, Any], fallback: str) -> str:
    # "Oslo, Norway" -> "Oslo"
    display = str(first.get("display_name") or "").split(",")[0].strip()
    return display or fallback


class NominatimGeocoder:
    """Single-shot Nominatim search. No retries: callers surface the failure."""

    provider = "nominatim"

    def __init__(
        self,
        *,
        url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._url = url or settings.nominatim_url
        self._user_agent = user_agent or settings.nominatim_user_agent
        self._timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds

    async def search(self, client: httpx.AsyncClient, query: str) -> GeocodeHit | None:
        """Return the best hit, ``None`` for zero results, or raise :class:`GeocoderError`."""

        try:
            response = await client.get(
                self._url,
                params={"q": query, "format": "json", "limit": 1, "addressdetails": 1},
                headers={"User-Agent": self._user_agent, "Accept": "application/json"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning("geocoder_request_failed", provider=self.provider, error=str(exc))
            raise GeocoderError("Geocoding provider error") from exc

        if not response.is_success:
            logger.warning("geocoder_bad_status", provider=self.provider, status=response.status_code)
            raise GeocoderError("Geocoding provider error")

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("geocoder_invalid_json", provider=self.provider)
            raise GeocoderError("Geocoding provider error") from exc

        if not isinstance(payload, list):
            logger.warning("geocoder_malformed_payload", provider=self.provider)
            raise GeocoderError("Geocoding provider error")
        if not payload:
            return None

        first = payload[0]
        try:
            lat = float(first["lat"])
            lng = float(first["lon"])
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("geocoder_invalid_coordinates", provider=self.provider)
            raise GeocoderError("Geocoding provider error") from exc
        # float() accepts "nan" and "inf"
        if not (math.isfinite(lat) and math.isfinite(lng)) or abs(lat) > 90 or abs(lng) > 180:
            logger.warning("geocoder_invalid_coordinates", provider=self.provider)
            raise GeocoderError("Geocoding provider error")
        return GeocodeHit(lat=lat, lng=lng, name=_display_name(first, query))


def _default_client_factory() -> httpx.AsyncClient:
    return httpx.AsyncClient()


class PlaceResolver:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        geocoder: NominatimGeocoder | None = None,
        client_factory: ClientFactory = _default_client_factory,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._geocoder = geocoder or NominatimGeocoder()
        self._client_factory = client_factory
        self._clock = clock

    async def resolve(self, query: str | None) -> PlaceResolution:
        trimmed = (query or "").strip()
        if len(trimmed) < MIN_QUERY_LENGTH:
            raise ValidationError(
                f"Query too short (min {MIN_QUERY_LENGTH} characters)", code="INVALID_QUERY"
            )
        if len(trimmed) > MAX_QUERY_LENGTH:
            raise ValidationError(
                f"Query too long (max {MAX_QUERY_LENGTH} characters)", code="INVALID_QUERY"
            )
        key = normalize_query(trimmed)

        async with self._uow_factory() as uow:
            cached = await uow.places.get(key)
        if cached is not None:
            logger.info("place_resolved", source="cache")
            return ResolvedPlace(lat=cached.lat, lng=cached.lng, name=cached.name, source="cache")

        # The provider sees the trimmed original text, not the lowercased key
        async with self._client_factory() as client:
            hit = await self._geocoder.search(client, trimmed)
        if hit is None:
            logger.info("place_not_found", provider=self._geocoder.provider)
            return PlaceNotFound()

        background.spawn(self._store(trimmed, key, hit), name="place_cache_write")
        logger.info("place_resolved", source="provider", provider=self._geocoder.provider)
        return ResolvedPlace(lat=hit.lat, lng=hit.lng, name=hit.name, source="provider")

    async def _store(self, query: str, key: str, hit: GeocodeHit) -> None:
        try:
            async with self._uow_factory() as uow:
                await uow.places.add(
                    q=query,
                    q_lower=key,
                    lat=hit.lat,
                    lng=hit.lng,
                    name=hit.name,
                    provider=self._geocoder.provider,
                    created_at=self._clock(),
                )
        except IntegrityError as exc:
            async with self._uow_factory() as uow:
                existing = await uow.places.get(key)
            if existing is not None:
                logger.info("place_cache_write_skipped", reason="duplicate")
            else:
                logger.warning("place_cache_write_failed", error=str(exc.orig))

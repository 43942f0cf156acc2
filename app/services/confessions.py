"""Confession admission pipeline: filter, per-actor cooldown and insert in one transaction."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Final

import structlog

from app.core.exceptions import (
    AdmissionError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from app.infra.unit_of_work import UnitOfWork
from app.repositories.interfaces import ConfessionRow
from app.services import admission, events
from app.services.rate_limiter import RATE_LIMIT_MESSAGE, check_cooldown, cooldown_cutoff
from app.utils.datetime import utcnow

CONFESSION_TTL: Final[timedelta] = timedelta(hours=24)

UnitOfWorkFactory = Callable[[], UnitOfWork]
EventSink = Callable[..., None]

logger = structlog.get_logger(__name__)


def validate_coordinates(lat: float | None, lng: float | None) -> None:
    if (lat is None) != (lng is None):
        raise ValidationError("lat and lng must be given together", code="INVALID_COORDINATES")
    if lat is None or lng is None:
        return
    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lng <= 180.0):
        raise ValidationError("coordinates out of range", code="INVALID_COORDINATES")


class ConfessionService:
    """Use cases that create or moderate confessions."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        *,
        clock: Callable[[], datetime] = utcnow,
        event_sink: EventSink | None = events.emit,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._event_sink = event_sink

    def _emit(self, event_name: str, **fields) -> None:  # type: ignore[no-untyped-def]
        if self._event_sink is not None:
            self._event_sink(event_name, **fields)

    async def submit(
        self,
        *,
        text: str | None,
        actor_id: str | None,
        place_label: str | None = None,
        lat: float | None = None,
        lng: float | None = None,
    ) -> ConfessionRow:
        """Admit and store a confession.

        ``place_label`` is display-only on the submitting client and is not persisted.
        Raises :class:`AdmissionError`, :class:`ValidationError` or
        :class:`RateLimitError`; nothing is written in those cases.
        """

        try:
            clean = admission.admit(text)
        except AdmissionError as exc:
            logger.info("confession_rejected", code=exc.code, rule=exc.detail.get("rule"))
            self._emit("post_reject", reason_bucket="validation")
            raise
        validate_coordinates(lat, lng)

        now = self._clock()
        try:
            async with self._uow_factory() as uow:
                if actor_id:
                    claimed = await uow.confessions.claim_post_slot(
                        actor_id, now=now, cutoff=cooldown_cutoff(now)
                    )
                    if not claimed:
                        check_cooldown(await uow.confessions.last_posted_at(actor_id), now)
                        # Lost the claim to a concurrent post at the same instant
                        raise RateLimitError(RATE_LIMIT_MESSAGE, retry_after_seconds=1)
                row = await uow.confessions.insert(
                    text=clean,
                    lat=lat,
                    lng=lng,
                    created_at=now,
                    expires_at=now + CONFESSION_TTL,
                    actor_id=actor_id,
                )
        except RateLimitError as exc:
            logger.info("confession_rejected", code=exc.code, retry_after=exc.retry_after_seconds)
            self._emit("post_reject", reason_bucket="rate_limit")
            raise

        logger.info(
            "confession_accepted",
            confession_id=row.id,
            geotagged=row.lat is not None,
            has_place_label=bool(place_label),
        )
        self._emit("post_success", mode="near" if row.lat is not None else "world")
        return row

    async def hide(self, confession_id: str) -> None:
        """Moderation: exclude a confession from every feed from now on."""
        async with self._uow_factory() as uow:
            if not await uow.confessions.hide(confession_id):
                raise NotFoundError("confession not found")
        logger.info("confession_hidden", confession_id=confession_id)

"""Client-local session and ad-gating state.

A session starts on cold start, or on returning to the foreground after at least
ten minutes in the background. Within a session every "load more" fetch counts
towards arming a single ad; once that ad has been shown, fetches stop counting.

State transitions are pure: ``reduce(state, event) -> state``. New session ids
are minted when the event is created, so ``reduce`` itself has no side effects.
Only the backgrounding timestamp is written to disk (:class:`SessionStore`).
"""

from __future__ import annotations

import hashlib
import json
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Final

import structlog

logger = structlog.get_logger(__name__)

BACKGROUND_THRESHOLD: Final[timedelta] = timedelta(minutes=10)
AD_TRIGGER_THRESHOLD: Final[int] = 4


def new_session_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class SessionState:
    session_id: str
    page_fetch_count: int = 0
    ad_armed: bool = False
    ad_shown: bool = False
    last_background_at: datetime | None = None

    @property
    def ad_ready(self) -> bool:
        return self.ad_armed and not self.ad_shown

    @property
    def session_hash(self) -> str:
        """Analytics key for this session; it rotates whenever a new session starts."""
        return hashlib.sha256(self.session_id.encode()).hexdigest()


@dataclass(frozen=True)
class ColdStart:
    session_id: str = field(default_factory=new_session_id)


@dataclass(frozen=True)
class Backgrounded:
    at: datetime


@dataclass(frozen=True)
class Foregrounded:
    at: datetime
    # Used only if the background gap starts a new session
    session_id: str = field(default_factory=new_session_id)


@dataclass(frozen=True)
class PageFetched:
    pass


@dataclass(frozen=True)
class AdShown:
    pass


SessionEvent = ColdStart | Backgrounded | Foregrounded | PageFetched | AdShown


def reduce(state: SessionState | None, event: SessionEvent) -> SessionState:
    if isinstance(event, ColdStart) or state is None:
        session_id = getattr(event, "session_id", None) or new_session_id()
        return SessionState(session_id=session_id)

    if isinstance(event, Backgrounded):
        return replace(state, last_background_at=event.at)

    if isinstance(event, Foregrounded):
        if state.last_background_at is None:
            return state
        if event.at - state.last_background_at >= BACKGROUND_THRESHOLD:
            return SessionState(session_id=event.session_id)
        return replace(state, last_background_at=None)

    if isinstance(event, PageFetched):
        if state.ad_shown:
            return state
        count = state.page_fetch_count + 1
        return replace(
            state,
            page_fetch_count=count,
            ad_armed=state.ad_armed or count >= AD_TRIGGER_THRESHOLD,
        )

    if isinstance(event, AdShown):
        return replace(state, ad_armed=False, ad_shown=True)

    raise TypeError(f"unknown session event: {event!r}")


class SessionStore:
    """Holds the current :class:`SessionState` for the application.

    ``path`` is a small JSON file holding ``last_background_at`` and nothing else.
    A missing or unreadable file is treated as "never backgrounded".
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path else None
        self._state = reduce(None, ColdStart())
        self._persist(None)

    @property
    def state(self) -> SessionState:
        return self._state

    def dispatch(self, event: SessionEvent) -> SessionState:
        previous = self._state
        current = previous
        if isinstance(event, Foregrounded):
            # The file outlives a suspended process; it wins over memory when readable
            stored = self._stored_background_at()
            if stored is not None:
                current = replace(previous, last_background_at=stored)
        self._state = reduce(current, event)
        if self._state.session_id != previous.session_id:
            logger.info("session_started", trigger=type(event).__name__)
        if self._state.last_background_at != current.last_background_at:
            self._persist(self._state.last_background_at)
        return self._state

    def _stored_background_at(self) -> datetime | None:
        if self._path is None:
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            raw = data.get("last_background_at")
            return datetime.fromisoformat(raw) if raw else None
        except (OSError, ValueError, AttributeError):
            return None

    def _persist(self, value: datetime | None) -> None:
        if self._path is None:
            return
        try:
            if value is None:
                self._path.unlink(missing_ok=True)
            else:
                self._path.write_text(
                    json.dumps({"last_background_at": value.isoformat()}), encoding="utf-8"
                )
        except OSError as exc:
            logger.warning("session_store_write_failed", error=str(exc))

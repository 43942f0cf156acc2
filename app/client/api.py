"""Async HTTP client for the Confess API.

Every call returns a result object instead of raising: transport problems, server
errors and a missing base URL all come back as tagged failures the UI can show.
Nothing is retried automatically.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Literal

import httpx
import structlog

from app.client.session import SessionState

logger = structlog.get_logger(__name__)

ACTOR_HEADER = "X-Actor-Id"


class PostErrorTag(str, Enum):
    EMPTY_TEXT = "EMPTY_TEXT"
    TEXT_TOO_LONG = "TEXT_TOO_LONG"
    CONTENT_BLOCKED = "CONTENT_BLOCKED"
    RATE_LIMIT = "RATE_LIMIT"
    ERROR = "ERROR"


POST_ERROR_MESSAGES: dict[PostErrorTag, str] = {
    PostErrorTag.EMPTY_TEXT: "Write something first.",
    PostErrorTag.TEXT_TOO_LONG: "Keep it under 120 characters.",
    PostErrorTag.CONTENT_BLOCKED: (
        "This can't be shared.\n"
        "Avoid names, contact details, or anything that could identify someone."
    ),
    PostErrorTag.RATE_LIMIT: "Slow down, try again in a few seconds.",
    PostErrorTag.ERROR: "Could not save confession",
}


@dataclass(frozen=True)
class Confession:
    id: str
    text: str
    created_at: datetime
    expires_at: datetime
    lat: float | None = None
    lng: float | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Confession:
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
            lat=data.get("lat"),
            lng=data.get("lng"),
        )


@dataclass(frozen=True)
class Cursor:
    # Kept as the server's string so microseconds survive the round trip
    created_at: str
    id: str


@dataclass(frozen=True)
class PostOk:
    confession: Confession
    ok: Literal[True] = True


@dataclass(frozen=True)
class PostFailed:
    error: PostErrorTag
    message: str
    retry_after_seconds: int | None = None
    ok: Literal[False] = False


PostResult = PostOk | PostFailed


@dataclass(frozen=True)
class FeedPage:
    rows: tuple[Confession, ...] = ()
    next_cursor: Cursor | None = None
    has_more: bool = False
    # True when the page is empty because the request failed
    failed: bool = False


EMPTY_PAGE = FeedPage()


@dataclass(frozen=True)
class PlaceFound:
    name: str
    lat: float
    lng: float
    source: str
    ok: Literal[True] = True


@dataclass(frozen=True)
class PlaceMissing:
    ok: Literal[False] = False
    reason: Literal["NOT_FOUND"] = "NOT_FOUND"


@dataclass(frozen=True)
class PlaceLookupFailed:
    message: str
    ok: Literal[False] = False
    reason: Literal["ERROR"] = "ERROR"


PlaceResult = PlaceFound | PlaceMissing | PlaceLookupFailed


def _error_payload(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    error = body.get("error") if isinstance(body, dict) else None
    return error if isinstance(error, dict) else {}


class ConfessClient:
    def __init__(
        self,
        base_url: str | None,
        *,
        actor_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._client: httpx.AsyncClient | None = None
        base = (base_url or "").strip().rstrip("/")
        if base:
            headers = {ACTOR_HEADER: actor_id} if actor_id else {}
            self._client = httpx.AsyncClient(
                base_url=base, transport=transport, timeout=timeout, headers=headers
            )

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> ConfessClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def post_confession(
        self,
        text: str,
        *,
        place_label: str | None = None,
        lat: float | None = None,
        lng: float | None = None,
    ) -> PostResult:
        if self._client is None:
            return PostFailed(PostErrorTag.ERROR, "Not configured")

        payload: dict[str, Any] = {"text": text}
        if place_label:
            payload["place_label"] = place_label
        if lat is not None and lng is not None:
            payload["lat"] = lat
            payload["lng"] = lng

        try:
            response = await self._client.post("/confessions", json=payload)
        except httpx.HTTPError as exc:
            logger.warning("post_confession_failed", error=type(exc).__name__)
            return PostFailed(PostErrorTag.ERROR, POST_ERROR_MESSAGES[PostErrorTag.ERROR])

        if response.status_code == 201:
            try:
                return PostOk(Confession.from_json(response.json()))
            except (KeyError, TypeError, ValueError):
                logger.warning("post_confession_malformed_response")
                return PostFailed(PostErrorTag.ERROR, POST_ERROR_MESSAGES[PostErrorTag.ERROR])

        error = _error_payload(response)
        code = error.get("code")
        tag = PostErrorTag(code) if code in PostErrorTag.__members__ else PostErrorTag.ERROR
        if tag is PostErrorTag.ERROR:
            logger.warning("post_confession_rejected", status=response.status_code, code=code)
        retry_after = error.get("retry_after_seconds") if tag is PostErrorTag.RATE_LIMIT else None
        return PostFailed(tag, POST_ERROR_MESSAGES[tag], retry_after_seconds=retry_after)

    async def fetch_feed(
        self,
        mode: str = "world",
        *,
        cursor: Cursor | None = None,
        limit: int | None = None,
        lat: float | None = None,
        lng: float | None = None,
        radius_m: int | None = None,
    ) -> FeedPage:
        if self._client is None:
            return EMPTY_PAGE
        if mode == "near" and (lat is None or lng is None):
            logger.warning("fetch_feed_missing_coordinates")
            return EMPTY_PAGE

        params: dict[str, Any] = {"mode": mode}
        optional = {
            "limit": limit,
            "lat": lat,
            "lng": lng,
            "radius_m": radius_m,
            "cursor_created_at": cursor.created_at if cursor else None,
            "cursor_id": cursor.id if cursor else None,
        }
        params.update({k: v for k, v in optional.items() if v is not None})

        try:
            response = await self._client.get("/feed", params=params)
            response.raise_for_status()
            body = response.json()
            rows = tuple(Confession.from_json(r) for r in body["rows"])
            nc = body.get("next_cursor")
            next_cursor = Cursor(created_at=nc["created_at"], id=nc["id"]) if nc else None
            return FeedPage(rows=rows, next_cursor=next_cursor, has_more=bool(body["has_more"]))
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            logger.warning("fetch_feed_failed", mode=mode, error=type(exc).__name__)
            return FeedPage(failed=True)

    async def resolve_place(self, query: str) -> PlaceResult:
        if self._client is None:
            return PlaceLookupFailed("Not configured")
        try:
            response = await self._client.post("/places/resolve", json={"q": query})
        except httpx.HTTPError as exc:
            logger.warning("resolve_place_failed", error=type(exc).__name__)
            return PlaceLookupFailed("Network error")

        if response.status_code != 200:
            error = _error_payload(response)
            logger.warning("resolve_place_failed", status=response.status_code, code=error.get("code"))
            return PlaceLookupFailed(str(error.get("message") or "Lookup failed"))

        try:
            body = response.json()
            if body.get("ok") is False and body.get("reason") == "NOT_FOUND":
                return PlaceMissing()
            return PlaceFound(
                name=str(body.get("name") or query),
                lat=float(body["lat"]),
                lng=float(body["lng"]),
                source=str(body.get("source", "provider")),
            )
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning("resolve_place_malformed_response")
            return PlaceLookupFailed("Lookup failed")

    async def log_event(
        self,
        event_name: str,
        *,
        mode: str | None = None,
        reason_bucket: str | None = None,
        session: SessionState | None = None,
        session_hash: str | None = None,
    ) -> None:
        """Best effort; analytics never surfaces an error to the caller.

        Passing ``session`` tags the event with that session's hash; an explicit
        ``session_hash`` wins.
        """
        if self._client is None:
            return
        if session_hash is None and session is not None:
            session_hash = session.session_hash
        payload = {
            "event_name": event_name,
            "mode": mode,
            "reason_bucket": reason_bucket,
            "session_hash": session_hash,
        }
        try:
            await self._client.post("/events", json=payload)
        except httpx.HTTPError:
            logger.debug("log_event_failed", event_name=event_name)

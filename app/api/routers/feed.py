from __future__ import annotations

import re

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_feed_service
from app.core.exceptions import FeedQueryError
from app.repositories.interfaces import FeedCursor
from app.schemas.common import ErrorResponse
from app.schemas.feed import FeedResponse
from app.services.feed import FeedService
from app.utils.datetime import parse_iso

router = APIRouter(prefix="/feed", tags=["feed"])

# A time followed by a space and a bare offset: the "+" was decoded as a space
_SPACED_OFFSET = re.compile(r"(\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?) (\d{2}(?::?\d{2})?)$")


def _parse_cursor(created_at: str | None, cursor_id: str | None) -> FeedCursor | None:
    if created_at is None and cursor_id is None:
        return None
    if not created_at or not cursor_id:
        raise FeedQueryError(
            "cursor_created_at and cursor_id must be given together", code="INVALID_CURSOR"
        )
    try:
        ts = parse_iso(_SPACED_OFFSET.sub(r"\1+\2", created_at))
    except ValueError:
        raise FeedQueryError("malformed cursor_created_at", code="INVALID_CURSOR") from None
    return FeedCursor(created_at=ts, id=cursor_id)


@router.get(
    "",
    response_model=FeedResponse,
    summary="Read the feed",
    description=(
        "Newest first, keyset paginated on `(created_at, id)`. `mode=near` needs `lat`/`lng` "
        "and keeps only geotagged confessions within `radius_m`. `limit` is clamped to "
        "10..50 (default 30) and `radius_m` to 100..50000 (default 10000)."
    ),
    responses={422: {"model": ErrorResponse, "description": "Malformed feed request"}},
)
async def read_feed(
    mode: str = Query("world", description="world | near"),
    limit: int | None = Query(None),
    cursor_created_at: str | None = Query(None),
    cursor_id: str | None = Query(None),
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius_m: int | None = Query(None),
    svc: FeedService = Depends(get_feed_service),
):
    cursor = _parse_cursor(cursor_created_at, cursor_id)
    page = await svc.fetch(mode=mode, limit=limit, cursor=cursor, lat=lat, lng=lng, radius_m=radius_m)
    return FeedResponse.from_page(page)

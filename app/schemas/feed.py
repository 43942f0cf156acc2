from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_serializer

from app.schemas.confession import ConfessionOut
from app.services.feed import FeedPage
from app.utils.datetime import as_utc_aware


class FeedCursorOut(BaseModel):
    created_at: datetime
    id: str

    @field_serializer("created_at")
    def _utc(self, value: datetime) -> str:
        return as_utc_aware(value).isoformat()


class FeedResponse(BaseModel):
    rows: list[ConfessionOut]
    next_cursor: FeedCursorOut | None = None
    has_more: bool

    @classmethod
    def from_page(cls, page: FeedPage) -> FeedResponse:
        cursor = None
        if page.next_cursor is not None:
            cursor = FeedCursorOut(created_at=page.next_cursor.created_at, id=page.next_cursor.id)
        return cls(
            rows=[ConfessionOut.from_row(r) for r in page.rows],
            next_cursor=cursor,
            has_more=page.has_more,
        )

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_serializer

from app.repositories.interfaces import ConfessionRow
from app.utils.datetime import as_utc_aware


class ConfessionCreateRequest(BaseModel):
    # Length and content rules are enforced by the admission filter, not here,
    # so that refusals carry their own error codes.
    text: str | None = Field(default=None, description="Confession text (max 120 characters)")
    place_label: str | None = Field(default=None, max_length=200)
    lat: float | None = Field(default=None)
    lng: float | None = Field(default=None)


class ConfessionOut(BaseModel):
    id: str
    text: str
    created_at: datetime
    expires_at: datetime
    lat: float | None = None
    lng: float | None = None

    @field_serializer("created_at", "expires_at")
    def _utc(self, value: datetime) -> str:
        return as_utc_aware(value).isoformat()

    @classmethod
    def from_row(cls, row: ConfessionRow) -> ConfessionOut:
        return cls(
            id=row.id,
            text=row.text,
            created_at=row.created_at,
            expires_at=row.expires_at,
            lat=row.lat,
            lng=row.lng,
        )


class HideResponse(BaseModel):
    id: str
    hidden: bool = True

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_serializer

from app.repositories.interfaces import ReportRow
from app.utils.datetime import as_utc_aware


class ReportReason(str, Enum):
    identifying = "identifying"
    contact = "contact"
    threats = "threats"
    spam = "spam"
    other = "other"


class ReportStatus(str, Enum):
    open = "open"
    resolved = "resolved"


class ReportCreateRequest(BaseModel):
    reason: ReportReason = Field(description="Why the confession is reported")
    details: str | None = Field(default=None, max_length=500, description="Optional details")


class ReportCreatedOut(BaseModel):
    id: int
    status: str


class ReportAdminItem(BaseModel):
    id: int
    confession_id: str
    reason: str
    details: str | None
    status: str
    created_at: datetime

    @field_serializer("created_at")
    def _utc(self, value: datetime) -> str:
        return as_utc_aware(value).isoformat()

    @classmethod
    def from_row(cls, row: ReportRow) -> ReportAdminItem:
        return cls(
            id=row.id,
            confession_id=row.confession_id,
            reason=row.reason,
            details=row.details,
            status=row.status,
            created_at=row.created_at,
        )


class ReportAdminListResponse(BaseModel):
    items: list[ReportAdminItem]
    next_cursor: str | None = None

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class EventCreateRequest(BaseModel):
    event_name: str = Field(min_length=1, max_length=64, pattern=r"^[a-z][a-z0-9_]*$")
    mode: Literal["world", "near"] | None = None
    reason_bucket: Literal["validation", "rate_limit", "network"] | None = None
    session_hash: str | None = Field(default=None, max_length=64)


class EventAcceptedOut(BaseModel):
    accepted: bool = True

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class PlaceResolveRequest(BaseModel):
    q: str | None = Field(default=None, description="Free-text place name (2-80 characters)")


class PlaceResolvedOut(BaseModel):
    ok: Literal[True] = True
    lat: float
    lng: float
    name: str
    source: Literal["cache", "provider"]


class PlaceNotFoundOut(BaseModel):
    ok: Literal[False] = False
    reason: Literal["NOT_FOUND"] = "NOT_FOUND"


PlaceResolveResponse = PlaceResolvedOut | PlaceNotFoundOut

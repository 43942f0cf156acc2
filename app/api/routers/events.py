from __future__ import annotations

from fastapi import APIRouter, status

from app.schemas.event import EventAcceptedOut, EventCreateRequest
from app.services import events

router = APIRouter(prefix="/events", tags=["events"])


@router.post(
    "",
    response_model=EventAcceptedOut,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Record an anonymous analytics event",
)
async def post_event(body: EventCreateRequest):
    events.emit(
        body.event_name,
        mode=body.mode,
        reason_bucket=body.reason_bucket,
        session_hash=body.session_hash,
    )
    return EventAcceptedOut()

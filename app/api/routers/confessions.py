from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.api.deps import get_actor_id, get_confession_service, get_report_service
from app.schemas.common import ErrorResponse
from app.schemas.confession import ConfessionCreateRequest, ConfessionOut
from app.schemas.report import ReportCreatedOut, ReportCreateRequest
from app.services.confessions import ConfessionService
from app.services.reports import ReportService

router = APIRouter(prefix="/confessions", tags=["confessions"])


@router.post(
    "",
    response_model=ConfessionOut,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a confession",
    description=(
        "Runs the admission filter, applies the per-actor posting cooldown and stores the "
        "confession for 24 hours. `lat`/`lng` are optional and must be given together."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Refused by the admission filter"},
        429: {"model": ErrorResponse, "description": "Posting cooldown still running"},
    },
)
async def create_confession(
    body: ConfessionCreateRequest,
    actor_id: str = Depends(get_actor_id),
    svc: ConfessionService = Depends(get_confession_service),
):
    row = await svc.submit(
        text=body.text,
        actor_id=actor_id,
        place_label=body.place_label,
        lat=body.lat,
        lng=body.lng,
    )
    return ConfessionOut.from_row(row)


@router.post(
    "/{confession_id}/report",
    response_model=ReportCreatedOut,
    status_code=status.HTTP_201_CREATED,
    summary="Report a confession",
    responses={404: {"model": ErrorResponse, "description": "Confession not visible"}},
)
async def report_confession(
    confession_id: str,
    body: ReportCreateRequest,
    svc: ReportService = Depends(get_report_service),
):
    r = await svc.create(confession_id, reason=body.reason.value, details=body.details)
    return ReportCreatedOut(id=r.id, status=r.status)

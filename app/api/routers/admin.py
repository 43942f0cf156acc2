from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_confession_service, get_report_service, require_admin
from app.schemas.confession import HideResponse
from app.schemas.report import (
    ReportAdminItem,
    ReportAdminListResponse,
    ReportCreatedOut,
    ReportStatus,
)
from app.services.confessions import ConfessionService
from app.services.reports import ReportService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/reports", response_model=ReportAdminListResponse, summary="List reports (keyset)")
async def list_reports(
    status: ReportStatus = Query(ReportStatus.open),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
    svc: ReportService = Depends(get_report_service),
):
    items, next_cursor = await svc.admin_list(
        status=status.value, limit=limit, cursor_token=cursor
    )
    return ReportAdminListResponse(
        items=[ReportAdminItem.from_row(r) for r in items], next_cursor=next_cursor
    )


@router.patch(
    "/reports/{report_id}:resolve", response_model=ReportCreatedOut, summary="Resolve a report"
)
async def resolve_report(report_id: int, svc: ReportService = Depends(get_report_service)):
    r = await svc.resolve(report_id)
    return ReportCreatedOut(id=r.id, status=r.status)


@router.post(
    "/confessions/{confession_id}:hide",
    response_model=HideResponse,
    summary="Hide a confession from every feed",
)
async def hide_confession(
    confession_id: str, svc: ConfessionService = Depends(get_confession_service)
):
    await svc.hide(confession_id)
    return HideResponse(id=confession_id, hidden=True)

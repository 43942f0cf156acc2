from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ConfessionReport
from app.repositories.interfaces import ReportRepository, ReportRow


def _to_row(r: ConfessionReport) -> ReportRow:
    return ReportRow(
        id=int(r.id),
        confession_id=str(r.confession_id),
        reason=r.reason,
        details=r.details,
        status=r.status,
        created_at=r.created_at,
    )


class SqlAlchemyReportRepository(ReportRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self, *, confession_id: str, reason: str, details: str | None, created_at: datetime
    ) -> ReportRow:
        r = ConfessionReport(
            confession_id=confession_id,
            reason=reason,
            details=details,
            status="open",
            created_at=created_at,
        )
        self._session.add(r)
        await self._session.flush()
        return _to_row(r)

    async def list_by_status_keyset(
        self, *, status: str, limit: int, cursor: tuple[datetime, int] | None
    ) -> tuple[list[ReportRow], tuple[datetime, int] | None]:
        # keyset on (created_at DESC, id DESC)
        stmt = select(ConfessionReport).where(ConfessionReport.status == status)
        if cursor:
            cts, cid = cursor
            stmt = stmt.where(
                or_(
                    ConfessionReport.created_at < cts,
                    and_(ConfessionReport.created_at == cts, ConfessionReport.id < int(cid)),
                )
            )
        stmt = stmt.order_by(ConfessionReport.created_at.desc(), ConfessionReport.id.desc()).limit(
            limit + 1
        )
        rows = list((await self._session.scalars(stmt)).all())
        items = [_to_row(r) for r in rows[:limit]]
        next_cursor: tuple[datetime, int] | None = None
        if len(rows) > limit and items:
            last = items[-1]
            next_cursor = (last.created_at, last.id)
        return items, next_cursor

    async def resolve(self, report_id: int) -> ReportRow | None:
        r = await self._session.get(ConfessionReport, report_id)
        if not r:
            return None
        r.status = "resolved"
        await self._session.flush()
        return _to_row(r)

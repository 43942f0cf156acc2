from __future__ import annotations

import base64
import json
from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from app.core.exceptions import NotFoundError, ValidationError
from app.infra.unit_of_work import UnitOfWork
from app.repositories.interfaces import ReportRow
from app.utils.datetime import utcnow

UnitOfWorkFactory = Callable[[], UnitOfWork]

logger = structlog.get_logger(__name__)


def encode_cursor(dt: datetime, rid: int) -> str:
    payload: dict[str, Any] = {"k": [dt.isoformat(), int(rid)]}
    return base64.urlsafe_b64encode(json.dumps(payload).encode()).decode()


def decode_cursor(token: str) -> tuple[datetime, int]:
    try:
        data = json.loads(base64.urlsafe_b64decode(token.encode()).decode())
        k = data.get("k")
        if not (isinstance(k, list) and len(k) == 2):
            raise ValueError("bad shape")
        return (datetime.fromisoformat(k[0]), int(k[1]))
    except Exception as exc:  # noqa: BLE001
        raise ValidationError("invalid cursor", code="INVALID_CURSOR") from exc


class ReportService:
    def __init__(
        self, uow_factory: UnitOfWorkFactory, *, clock: Callable[[], datetime] = utcnow
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    async def create(self, confession_id: str, *, reason: str, details: str | None) -> ReportRow:
        now = self._clock()
        async with self._uow_factory() as uow:
            if await uow.confessions.get_visible(confession_id, now=now) is None:
                raise NotFoundError("confession not found")
            r = await uow.reports.create(
                confession_id=confession_id,
                reason=reason,
                details=(details or "").strip() or None,
                created_at=now,
            )
        logger.info("report_accepted", confession_id=confession_id, reason=reason)
        return r

    async def admin_list(
        self, *, status: str, limit: int, cursor_token: str | None
    ) -> tuple[list[ReportRow], str | None]:
        cursor = decode_cursor(cursor_token) if cursor_token else None
        async with self._uow_factory() as uow:
            items, next_cursor = await uow.reports.list_by_status_keyset(
                status=status, limit=limit, cursor=cursor
            )
        next_token = encode_cursor(next_cursor[0], next_cursor[1]) if next_cursor else None
        return items, next_token

    async def resolve(self, report_id: int) -> ReportRow:
        async with self._uow_factory() as uow:
            r = await uow.reports.resolve(report_id)
        if r is None:
            raise NotFoundError("report not found")
        logger.info("report_resolved", report_id=report_id)
        return r

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from app.models import Confession, ConfessionReport
from app.utils.datetime import utcnow
from scripts import cleanup_confessions as cleanup_script


def _confession(cid: str, age: timedelta) -> Confession:
    created = utcnow() - age
    return Confession(
        id=cid, text=cid, created_at=created, expires_at=created + timedelta(hours=24)
    )


@pytest.mark.asyncio
async def test_cleanup_deletes_only_expired(session, capsys):
    session.add_all(
        [
            _confession("old", timedelta(hours=25)),
            _confession("fresh", timedelta(hours=1)),
        ]
    )
    await session.flush()
    session.add(
        ConfessionReport(
            confession_id="old", reason="spam", status="open", created_at=utcnow()
        )
    )
    await session.commit()

    rc = await cleanup_script.main([])

    assert rc == 0
    out = capsys.readouterr().out
    assert "deleted confessions: 1" in out
    assert "cleared cooldowns: 0" in out
    session.expire_all()
    ids = (await session.scalars(select(Confession.id))).all()
    assert ids == ["fresh"]
    reports = await session.scalar(select(func.count()).select_from(ConfessionReport))
    assert reports == 0


@pytest.mark.asyncio
async def test_cleanup_window_is_configurable(session, capsys):
    session.add(_confession("two-hours", timedelta(hours=2)))
    await session.commit()

    await cleanup_script.main(["--window-hours", "1"])

    assert "deleted confessions: 1" in capsys.readouterr().out

"""Periodic physical deletion of expired confessions.

The feed query already filters on ``expires_at``; this job removes the rows
themselves once their creation time is older than the visibility window.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

import structlog

from app.infra.unit_of_work import UnitOfWork
from app.services.confessions import CONFESSION_TTL
from app.utils.datetime import utcnow

logger = structlog.get_logger(__name__)


async def sweep_expired(
    uow_factory: Callable[[], UnitOfWork],
    *,
    now: datetime | None = None,
    window: timedelta = CONFESSION_TTL,
) -> dict[str, int]:
    """Delete confessions created before ``now - window`` and return a summary.

    Cooldown rows older than the same cutoff go too, so no actor id outlives its posts.
    """

    cutoff = (now or utcnow()) - window
    async with uow_factory() as uow:
        deleted = await uow.confessions.delete_created_before(cutoff)
        cooldowns = await uow.confessions.clear_cooldowns_before(cutoff)
    logger.info(
        "confessions_swept",
        deleted=deleted,
        cooldowns_cleared=cooldowns,
        cutoff=cutoff.isoformat(),
    )
    return {"deleted": deleted, "cooldowns_cleared": cooldowns}

"""Per-actor posting cooldown."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Final

from app.core.exceptions import RateLimitError

POST_COOLDOWN: Final[timedelta] = timedelta(seconds=15)
RATE_LIMIT_MESSAGE: Final[str] = "Please wait before posting again"


def cooldown_cutoff(now: datetime, cooldown: timedelta = POST_COOLDOWN) -> datetime:
    """Latest previous-post time that still allows posting at ``now``."""
    return now - cooldown


def check_cooldown(
    last_posted_at: datetime | None, now: datetime, cooldown: timedelta = POST_COOLDOWN
) -> None:
    """Raise :class:`RateLimitError` when ``now`` is inside the actor's cooldown.

    Actors without a previous accepted post are always allowed.
    """

    if last_posted_at is None:
        return
    elapsed = now - last_posted_at
    if elapsed < cooldown:
        remaining = (cooldown - elapsed).total_seconds()
        raise RateLimitError(RATE_LIMIT_MESSAGE, retry_after_seconds=max(1, math.ceil(remaining)))


__all__ = ["POST_COOLDOWN", "RATE_LIMIT_MESSAGE", "check_cooldown", "cooldown_cutoff"]

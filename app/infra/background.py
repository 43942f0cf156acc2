"""Detached best-effort tasks (cache writes, analytics).

Failures are logged and swallowed; they never reach the request that spawned them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

_TASKS: set[asyncio.Task] = set()


async def _guarded(coro: Coroutine[Any, Any, Any], name: str) -> None:
    try:
        await coro
    except asyncio.CancelledError:
        raise
    except Exception:
        logger.warning("background_task_failed", task=name, exc_info=True)


def spawn(coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task:
    task = asyncio.create_task(_guarded(coro, name), name=name)
    # Hold a strong reference until done; the loop only keeps weak ones
    _TASKS.add(task)
    task.add_done_callback(_TASKS.discard)
    return task


async def drain() -> None:
    """Wait for every pending background task (shutdown hook and tests)."""
    while _TASKS:
        await asyncio.gather(*list(_TASKS), return_exceptions=True)


def pending() -> int:
    return len(_TASKS)

"""Schema migrations on startup, and the readiness flag ``/readyz`` reports.

In prod the app refuses to start until ``alembic upgrade head`` succeeds. Elsewhere
the upgrade runs on a daemon thread and the API answers ``/readyz`` with 503 until
it finishes, so a slow database does not block the liveness probe.
"""

from __future__ import annotations

import os
import subprocess
import threading
import time
from pathlib import Path
from typing import Final

import structlog
from structlog.stdlib import BoundLogger

_PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parents[2]
ALEMBIC_INI: Final[Path] = _PROJECT_ROOT / "alembic.ini"

_MAX_ATTEMPTS: Final[int] = int(os.getenv("ALEMBIC_STARTUP_MAX_ATTEMPTS", "10"))
_RETRY_DELAY_SECONDS: Final[float] = float(os.getenv("ALEMBIC_STARTUP_RETRY_SECONDS", "2"))


class _MigrationState:
    def __init__(self) -> None:
        self.completed = False
        self.error: str | None = None
        self.worker: threading.Thread | None = None

    def succeed(self) -> None:
        self.completed = True
        self.error = None

    def fail(self, message: str | None) -> None:
        self.completed = False
        self.error = message


_state = _MigrationState()


def _truthy(value: str | None) -> bool:
    return value is not None and value.lower() in {"1", "true", "yes", "on"}


def _exit_on_failure() -> bool:
    override = os.getenv("ALEMBIC_EXIT_ON_FAILURE")
    if override is not None:
        return _truthy(override)
    return os.getenv("APP_ENV", "dev").lower() == "prod"


def is_migration_completed() -> bool:
    return _state.completed


def last_migration_error() -> str | None:
    return _state.error


def alembic_command() -> tuple[str, ...]:
    # Absolute config path so the upgrade works from any working directory
    return ("alembic", "-c", str(ALEMBIC_INI), "upgrade", "head")


def run_database_migrations() -> None:
    """Bring the schema to ``head``; blocking in prod, on a background thread otherwise."""

    logger = structlog.get_logger(__name__)

    if _state.completed:
        logger.info("alembic_upgrade_skipped", reason="already_completed")
        return

    if os.getenv("TESTING"):
        # Tests build the schema from the models
        _state.succeed()
        logger.info("alembic_upgrade_skipped", reason="testing")
        return

    if _exit_on_failure():
        success, error_message = _run_migrations_sequence(logger)
        if success:
            _state.succeed()
            return
        _state.fail(error_message)
        raise SystemExit(1)

    if _state.worker and _state.worker.is_alive():
        logger.info("alembic_upgrade_skipped", reason="already_running")
        return

    _state.fail(None)
    _state.worker = threading.Thread(
        target=_run_migrations_in_background, name="alembic-startup", daemon=True
    )
    _state.worker.start()
    logger.info("alembic_upgrade_background_started")


def _run_migrations_in_background() -> None:
    success, error_message = _run_migrations_sequence(
        structlog.get_logger(__name__).bind(mode="async")
    )
    if success:
        _state.succeed()
    else:
        _state.fail(error_message)


def _run_migrations_sequence(logger: BoundLogger) -> tuple[bool, str | None]:
    command = alembic_command()
    last_error: str | None = None

    for attempt in range(1, _MAX_ATTEMPTS + 1):
        try:
            logger.info("alembic_upgrade_start", attempt=attempt)
            subprocess.run(command, check=True, cwd=_PROJECT_ROOT)
        except FileNotFoundError:
            logger.error("alembic_command_missing", command=" ".join(command))
            return False, "alembic command not found"
        except subprocess.CalledProcessError as exc:
            last_error = f"alembic exited with return code {exc.returncode}"
            logger.error("alembic_upgrade_failed", attempt=attempt, returncode=exc.returncode)
        else:
            logger.info("alembic_upgrade_succeeded", attempt=attempt)
            return True, None

        if attempt < _MAX_ATTEMPTS:
            delay = _RETRY_DELAY_SECONDS * attempt
            logger.info("alembic_upgrade_retry", next_attempt=attempt + 1, delay_seconds=delay)
            time.sleep(delay)

    logger.error("alembic_upgrade_exhausted", attempts=_MAX_ATTEMPTS)
    return False, last_error or "alembic upgrade failed"


__all__ = [
    "ALEMBIC_INI",
    "alembic_command",
    "is_migration_completed",
    "last_migration_error",
    "run_database_migrations",
]

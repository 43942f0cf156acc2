"""Operations helper that physically deletes expired confessions.

Feeds already hide anything past ``expires_at``; this job removes the rows (and the
reports attached to them) so nothing outlives the 24 hour window on disk. Run it
hourly from cron:

    0 * * * *  python -m scripts.cleanup_confessions
"""

import argparse
import asyncio
from datetime import timedelta

from app import db
from app.infra.unit_of_work import SqlAlchemyUnitOfWork
from app.logging import setup_logging
from app.services.sweep import sweep_expired


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Delete confessions older than the window")
    parser.add_argument(
        "--window-hours",
        type=float,
        default=24.0,
        help="Delete confessions created more than this many hours ago (default: 24)",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    setup_logging()
    summary = await sweep_expired(
        lambda: SqlAlchemyUnitOfWork(db.SessionLocal),
        window=timedelta(hours=args.window_hours),
    )
    print("deleted confessions: {deleted}".format(deleted=summary["deleted"]))
    print("cleared cooldowns: {cleared}".format(cleared=summary["cooldowns_cleared"]))
    await db.engine.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))

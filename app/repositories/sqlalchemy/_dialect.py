"""Dialect-specific INSERT constructs (ON CONFLICT is not part of core SQL)."""

from __future__ import annotations

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InfrastructureError


def upsert_insert(session: AsyncSession):
    """Return the ``insert`` function supporting ``on_conflict_*`` for the session's engine."""

    name = session.get_bind().dialect.name
    if name == "postgresql":
        return postgresql.insert
    if name == "sqlite":
        return sqlite.insert
    raise InfrastructureError(f"unsupported database dialect: {name}")

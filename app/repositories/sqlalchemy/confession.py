"""SQLAlchemy implementation of the confession repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, delete, false, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ActorCooldown, Confession, ConfessionReport
from app.repositories.interfaces import (
    ConfessionRepository,
    ConfessionRow,
    FeedCursor,
    NearFilter,
)
from app.repositories.sqlalchemy._dialect import upsert_insert
from app.utils.geo import distance_m_expr

_PUBLIC_COLUMNS = (
    Confession.id,
    Confession.text,
    Confession.created_at,
    Confession.expires_at,
    Confession.lat,
    Confession.lng,
)


def _to_row(row) -> ConfessionRow:  # type: ignore[no-untyped-def]
    return ConfessionRow(
        id=str(row.id),
        text=row.text,
        created_at=row.created_at,
        expires_at=row.expires_at,
        lat=row.lat,
        lng=row.lng,
    )


def _visible(now: datetime):  # type: ignore[no-untyped-def]
    return and_(Confession.expires_at > now, Confession.hidden == false())


class SqlAlchemyConfessionRepository(ConfessionRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def claim_post_slot(self, actor_id: str, *, now: datetime, cutoff: datetime) -> bool:
        """Atomically record a post at ``now`` unless the actor posted after ``cutoff``.

        One conditional upsert: a concurrent claim for the same actor blocks on the row
        and then re-evaluates the WHERE clause against the winner's timestamp.
        """
        insert = upsert_insert(self._session)
        stmt = insert(ActorCooldown).values(actor_id=actor_id, last_posted_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[ActorCooldown.actor_id],
            set_={"last_posted_at": stmt.excluded.last_posted_at},
            where=ActorCooldown.last_posted_at <= cutoff,
        ).returning(ActorCooldown.actor_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def last_posted_at(self, actor_id: str) -> datetime | None:
        stmt = select(ActorCooldown.last_posted_at).where(ActorCooldown.actor_id == actor_id)
        return await self._session.scalar(stmt)

    async def insert(
        self,
        *,
        text: str,
        lat: float | None,
        lng: float | None,
        created_at: datetime,
        expires_at: datetime,
        actor_id: str | None,
    ) -> ConfessionRow:
        confession = Confession(
            text=text,
            lat=lat,
            lng=lng,
            created_at=created_at,
            expires_at=expires_at,
            hidden=False,
            actor_id=actor_id,
        )
        self._session.add(confession)
        await self._session.flush()
        return _to_row(confession)

    async def query_feed(
        self,
        *,
        now: datetime,
        limit: int,
        cursor: FeedCursor | None,
        near: NearFilter | None,
    ) -> list[ConfessionRow]:
        stmt = select(*_PUBLIC_COLUMNS).where(_visible(now))
        if near is not None:
            stmt = stmt.where(
                Confession.lat.is_not(None),
                Confession.lng.is_not(None),
                distance_m_expr(Confession.lat, Confession.lng, near.lat, near.lng)
                <= near.radius_m,
            )
        if cursor is not None:
            stmt = stmt.where(
                or_(
                    Confession.created_at < cursor.created_at,
                    and_(Confession.created_at == cursor.created_at, Confession.id < cursor.id),
                )
            )
        stmt = stmt.order_by(Confession.created_at.desc(), Confession.id.desc()).limit(limit)
        rows = (await self._session.execute(stmt)).all()
        return [_to_row(r) for r in rows]

    async def get_visible(self, confession_id: str, *, now: datetime) -> ConfessionRow | None:
        stmt = select(*_PUBLIC_COLUMNS).where(Confession.id == confession_id, _visible(now))
        row = (await self._session.execute(stmt)).one_or_none()
        return _to_row(row) if row is not None else None

    async def hide(self, confession_id: str) -> bool:
        stmt = update(Confession).where(Confession.id == confession_id).values(hidden=True)
        result = await self._session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def delete_created_before(self, cutoff: datetime) -> int:
        expired_ids = select(Confession.id).where(Confession.created_at < cutoff)
        # SQLite does not enforce ON DELETE CASCADE unless the pragma is on
        await self._session.execute(
            delete(ConfessionReport).where(ConfessionReport.confession_id.in_(expired_ids))
        )
        result = await self._session.execute(delete(Confession).where(Confession.created_at < cutoff))
        return result.rowcount or 0

    async def clear_cooldowns_before(self, cutoff: datetime) -> int:
        # Drops the last trace of an actor once its posts are gone
        result = await self._session.execute(
            delete(ActorCooldown).where(ActorCooldown.last_posted_at < cutoff)
        )
        return result.rowcount or 0

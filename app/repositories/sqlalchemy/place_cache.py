from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import PlaceCache
from app.repositories.interfaces import PlaceCacheRepository, PlaceCacheRow


class SqlAlchemyPlaceCacheRepository(PlaceCacheRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, q_lower: str) -> PlaceCacheRow | None:
        stmt = select(
            PlaceCache.q, PlaceCache.lat, PlaceCache.lng, PlaceCache.name, PlaceCache.provider
        ).where(PlaceCache.q_lower == q_lower)
        row = (await self._session.execute(stmt)).first()
        if row is None:
            return None
        return PlaceCacheRow(
            q=row.q, lat=float(row.lat), lng=float(row.lng), name=row.name, provider=row.provider
        )

    async def add(
        self,
        *,
        q: str,
        q_lower: str,
        lat: float,
        lng: float,
        name: str,
        provider: str,
        created_at: datetime,
    ) -> None:
        """Insert a cache entry; a duplicate ``q_lower`` raises IntegrityError on flush."""
        self._session.add(
            PlaceCache(
                q=q,
                q_lower=q_lower,
                lat=lat,
                lng=lng,
                name=name,
                provider=provider,
                created_at=created_at,
            )
        )
        await self._session.flush()

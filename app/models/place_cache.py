"""Place resolution cache model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class PlaceCache(Base):
    """Geocoder results keyed by the normalized (trimmed, lowercased) query."""

    __tablename__ = "place_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    q: Mapped[str] = mapped_column(Text, nullable=False)
    q_lower: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    provider: Mapped[str] = mapped_column(String(32), nullable=False, default="nominatim")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

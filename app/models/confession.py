from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Confession(Base):
    __tablename__ = "confessions"
    __table_args__ = (
        Index("ix_confessions_created_at_id", "created_at", "id"),
        Index("ix_confessions_actor_created_at", "actor_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    # Both set or both null
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    # Naive UTC
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Used for rate limiting only, never serialized
    actor_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class EventLog(Base):
    """Anonymous, append-only analytics events (no actor id, no IP)."""

    __tablename__ = "event_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_name: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    day_bucket: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    time_bucket: Mapped[int] = mapped_column(Integer, nullable=False)
    mode: Mapped[str | None] = mapped_column(String(16), nullable=True)
    reason_bucket: Mapped[str | None] = mapped_column(String(32), nullable=True)
    session_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

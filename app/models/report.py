from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class ConfessionReport(Base):
    __tablename__ = "confession_reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    confession_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("confessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="open", server_default="open", index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class ActorCooldown(Base):
    """Last accepted submission per actor.

    The row is claimed with a conditional upsert inside the admission transaction,
    so two concurrent submissions from the same actor cannot both pass the cooldown.
    """

    __tablename__ = "actor_cooldowns"

    actor_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    last_posted_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

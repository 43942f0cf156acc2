# Imported for Alembic autogenerate / metadata.create_all
from .actor_cooldown import ActorCooldown
from .base import Base
from .confession import Confession
from .event_log import EventLog
from .place_cache import PlaceCache
from .report import ConfessionReport

__all__ = [
    "Base",
    "ActorCooldown",
    "Confession",
    "ConfessionReport",
    "EventLog",
    "PlaceCache",
]

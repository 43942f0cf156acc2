"""SQLAlchemy implementations of repository interfaces."""

from .confession import SqlAlchemyConfessionRepository
from .place_cache import SqlAlchemyPlaceCacheRepository
from .report import SqlAlchemyReportRepository

__all__ = [
    "SqlAlchemyConfessionRepository",
    "SqlAlchemyPlaceCacheRepository",
    "SqlAlchemyReportRepository",
]

"""API dependency helpers and service providers."""

import hmac

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app import db
from app.core.config import settings
from app.core.exceptions import AuthorizationError, ConfigurationError
from app.db import get_async_session
from app.infra.unit_of_work import SqlAlchemyUnitOfWork
from app.middleware.rate_limit import client_ip
from app.services.confessions import ConfessionService
from app.services.feed import FeedService
from app.services.geocode import PlaceResolver
from app.services.health import HealthService
from app.services.reports import ReportService

__all__ = [
    "get_actor_id",
    "get_confession_service",
    "get_feed_service",
    "get_place_resolver",
    "get_report_service",
    "get_health_service",
    "require_admin",
]

ACTOR_HEADER = "X-Actor-Id"
ADMIN_HEADER = "X-Admin-Token"


def get_actor_id(request: Request) -> str:
    """Stable per-device identity used for the posting cooldown.

    Clients send an opaque ``X-Actor-Id``; without one the caller's IP stands in.
    """
    actor = (request.headers.get(ACTOR_HEADER) or "").strip()
    if actor:
        return actor[:128]
    return f"ip:{client_ip(request)}"


def require_admin(x_admin_token: str | None = Header(default=None, alias=ADMIN_HEADER)) -> None:
    expected = settings.admin_token
    if not expected:
        raise ConfigurationError("admin access is not configured", code="ADMIN_DISABLED")
    if not x_admin_token or not hmac.compare_digest(x_admin_token, expected):
        raise AuthorizationError("invalid admin token")


# --- Service providers for DI ---


def _uow_factory() -> SqlAlchemyUnitOfWork:
    # Resolved per call so a reconfigured engine (tests) is picked up
    return SqlAlchemyUnitOfWork(db.SessionLocal)


def get_confession_service() -> ConfessionService:
    return ConfessionService(_uow_factory)


def get_feed_service() -> FeedService:
    return FeedService(_uow_factory)


def get_place_resolver() -> PlaceResolver:
    return PlaceResolver(_uow_factory)


def get_report_service() -> ReportService:
    return ReportService(_uow_factory)


def get_health_service(
    session: AsyncSession = Depends(get_async_session),
) -> HealthService:
    return HealthService(session)

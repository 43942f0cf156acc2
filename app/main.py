import os
from contextlib import asynccontextmanager

import sentry_sdk
import structlog
from fastapi import FastAPI, Request
from sentry_sdk.integrations.starlette import StarletteIntegration
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware

from app.api import errors
from app.api.routers.admin import router as admin_router
from app.api.routers.confessions import router as confessions_router
from app.api.routers.events import router as events_router
from app.api.routers.feed import router as feed_router
from app.api.routers.healthz import router as healthz_router
from app.api.routers.places import router as places_router
from app.api.routers.readyz import router as readyz_router
from app.core.startup import run_database_migrations
from app.infra import background
from app.logging import setup_logging
from app.middleware.rate_limit import (
    client_ip,
    limiter,
    rate_limit_middleware,
    rate_limited_response,
)
from app.middleware.request_id import request_id_middleware
from app.middleware.security_headers import security_headers_middleware


@asynccontextmanager
async def _lifespan(_: FastAPI):
    run_database_migrations()
    yield
    # Let pending cache writes and analytics inserts finish
    await background.drain()


def create_app() -> FastAPI:
    # Initialize structured logging first
    setup_logging()

    # Initialize Sentry (no-op if DSN is missing)
    dsn = os.getenv("SENTRY_DSN")
    env = os.getenv("APP_ENV", "dev")
    release = os.getenv("RELEASE")
    # traces_sample_rate: clamp to [0.0, 0.2]
    try:
        rate_raw = float(os.getenv("SENTRY_TRACES_RATE", "0"))
    except ValueError:
        rate_raw = 0.0
    traces_rate = max(0.0, min(0.2, rate_raw))

    if dsn:
        sentry_sdk.init(
            dsn=dsn,
            environment=env,
            release=release,
            integrations=[StarletteIntegration()],
            traces_sample_rate=traces_rate,
            send_default_pii=False,
        )

    app = FastAPI(title="Confess", lifespan=_lifespan)
    app.state.limiter = limiter
    errors.install(app)
    # Request-ID middleware (JSON access log)
    app.middleware("http")(request_id_middleware)
    # Security headers
    app.middleware("http")(security_headers_middleware)
    # Rate limiting (IP-based, method-specific)
    app.middleware("http")(rate_limit_middleware)

    # CORS from ALLOW_ORIGINS env (comma-separated)
    allow_origins = [o.strip() for o in os.getenv("ALLOW_ORIGINS", "").split(",") if o.strip()]
    if allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allow_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "OPTIONS", "HEAD"],
            allow_headers=["*"],
        )
    app.include_router(confessions_router)
    app.include_router(feed_router)
    app.include_router(places_router)
    app.include_router(events_router)
    app.include_router(admin_router)
    app.include_router(healthz_router)
    app.include_router(readyz_router)

    # Simple health for tests and uptime checks
    @app.get("/health")
    def health():
        return {"status": "ok", "env": os.getenv("APP_ENV", "dev")}

    # Debug-only endpoint to raise an error (disabled in prod)
    if env != "prod":

        @app.get("/debug/error")
        def debug_error():  # pragma: no cover - behavior verified by 404 in prod test
            raise RuntimeError("intentional error for Sentry debug")

    # 429 from route-level slowapi limits: same body as the middleware
    @app.exception_handler(RateLimitExceeded)
    async def _rate_limit_handler(request: Request, exc: RateLimitExceeded):  # type: ignore[unused-ignore]
        info = getattr(request.state, "rate_limit_info", None)
        if not isinstance(info, dict):
            info = {
                "method": request.method,
                "ip": client_ip(request),
                "limit": str(exc.detail),
            }
        return rate_limited_response(info)

    structlog.get_logger(__name__).info("app_startup", env=env)
    return app


app = create_app()

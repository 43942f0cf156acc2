# app/db.py
import math
import os

from sqlalchemy import event
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.core.config import DEFAULT_DATABASE_URL

DATABASE_URL = DEFAULT_DATABASE_URL

engine: AsyncEngine
SessionLocal: async_sessionmaker[AsyncSession]


def _apply_async_scheme(database_url: str) -> str:
    if database_url.startswith("postgresql+psycopg://"):
        return database_url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgresql+psycopg2://"):
        return database_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def _null_safe(fn):
    def _wrapped(value):
        if value is None:
            return None
        return fn(value)

    return _wrapped


_SQLITE_FUNCTIONS = {
    "radians": _null_safe(math.radians),
    "sin": _null_safe(math.sin),
    "cos": _null_safe(math.cos),
    "acos": _null_safe(math.acos),
}


def install_sqlite_functions(async_engine: AsyncEngine) -> None:
    """Register the trig functions used by the feed's distance filter on SQLite."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _record):  # pragma: no cover - driver callback
        for name, fn in _SQLITE_FUNCTIONS.items():
            dbapi_connection.create_function(name, 1, fn)


def _create_engine(database_url: str) -> AsyncEngine:
    url = make_url(database_url)
    connect_args = {}
    kwargs = {}

    # Handle sslmode for asyncpg
    if url.get_backend_name() == "postgresql" and url.get_driver_name() == "asyncpg":
        query = dict(url.query)
        if "sslmode" in query:
            # asyncpg accepts 'disable', 'allow', 'prefer', 'require', 'verify-ca', 'verify-full'
            connect_args["ssl"] = query.pop("sslmode")

        if "channel_binding" in query:
            # asyncpg does not support channel_binding, so we remove it
            query.pop("channel_binding")

        # Reconstruct URL without sslmode and channel_binding
        url = url._replace(query=query)

    # Connections must not outlive the event loop that opened them (pytest-asyncio
    # creates one loop per test); SQLite connections are cheap anyway.
    if url.get_backend_name() == "sqlite" or os.getenv("TESTING"):
        kwargs["poolclass"] = NullPool

    created = create_async_engine(
        url,
        pool_pre_ping=True,
        connect_args=connect_args,
        **kwargs,
    )
    if url.get_backend_name() == "sqlite":
        install_sqlite_functions(created)
    return created


def configure_engine(database_url: str | None = None) -> None:
    """Configure SQLAlchemy engine and session factory."""

    global engine, SessionLocal, DATABASE_URL

    DATABASE_URL = database_url or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    normalized_database_url = _apply_async_scheme(DATABASE_URL)
    engine = _create_engine(normalized_database_url)
    SessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_async_session() -> AsyncSession:
    async with SessionLocal() as session:
        yield session


configure_engine()

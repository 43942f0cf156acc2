# tests/conftest.py
import os
import tempfile

import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Load .env.test if available (pytest.ini env_file is not supported without plugin)
load_dotenv(".env.test", override=False)

# The app reads DATABASE_URL at import time, so configure the environment first.
# Postgres when TEST_DATABASE_URL is set, otherwise a throwaway SQLite file.
_TMP_DIR = tempfile.mkdtemp(prefix="confess-tests-")
DB_URL = os.getenv("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["DATABASE_URL"] = DB_URL
os.environ["TESTING"] = "1"
os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")

from httpx import ASGITransport, AsyncClient  # noqa: E402

from app import db  # noqa: E402
from app.infra import background  # noqa: E402
from app.infra.unit_of_work import SqlAlchemyUnitOfWork  # noqa: E402
from app.main import create_app  # noqa: E402
from app.middleware import rate_limit  # noqa: E402
from app.models.base import Base  # noqa: E402

ADMIN_TOKEN = os.environ["ADMIN_TOKEN"]


# ==== Engine / Schema ====
@pytest_asyncio.fixture(scope="function")
async def engine():
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield db.engine
    finally:
        # Background writes must land before the next test drops the schema
        await background.drain()


@pytest_asyncio.fixture(scope="function", name="session")
async def _session(engine):
    async with db.SessionLocal() as s:
        yield s
        if s.in_transaction():
            await s.rollback()


@pytest.fixture
def session_factory(engine):
    return db.SessionLocal


@pytest.fixture
def uow_factory(engine):
    return lambda: SqlAlchemyUnitOfWork(db.SessionLocal)


@pytest.fixture(autouse=True)
def _reset_ip_throttle():
    rate_limit.reset_storage()
    yield
    rate_limit.reset_storage()


@pytest_asyncio.fixture
async def app_client(engine):
    app = create_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": ADMIN_TOKEN}

import os

# Must be set before guestlist.config.settings is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./guestlist.db")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")

from contextlib import asynccontextmanager  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402

from guestlist.config.database import async_session_maker, engine  # noqa: E402
from guestlist.main import app  # noqa: E402
from guestlist.models import BaseModel, load_models  # noqa: E402

load_models()

_schema_created = False


@pytest_asyncio.fixture
async def clean_db():
    """Create the schema on first use, then empty every table before each test."""
    global _schema_created
    async with engine.begin() as conn:
        if not _schema_created:
            await conn.run_sync(BaseModel.metadata.drop_all)
            await conn.run_sync(BaseModel.metadata.create_all)
            _schema_created = True
        else:
            for table in reversed(BaseModel.metadata.sorted_tables):
                await conn.execute(table.delete())
    yield


@pytest_asyncio.fixture
async def db_session(clean_db):
    """A session handed to write/read models as session_overwrite; never committed."""
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def client_factory():
    @asynccontextmanager
    async def factory(overrides: dict | None = None):
        app.dependency_overrides.update(overrides or {})
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest_asyncio.fixture
async def client(client_factory):
    async with client_factory() as client:
        yield client


@pytest_asyncio.fixture
async def unreachable_store(tmp_path, monkeypatch):
    """Point every new session at a SQLite file inside a directory that does not exist."""
    from guestlist.config import database

    missing_engine = database.create_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'guestlist.db'}"
    )
    monkeypatch.setattr(
        database, "async_session_maker", async_sessionmaker(missing_engine, expire_on_commit=False)
    )
    yield
    await missing_engine.dispose()

"""Pytest configuration.

Settings are read from the environment at import time, so test defaults are
set here before the app is imported. Each test gets its own SQLite file.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("BIBLE_API_URL", "https://bible.test/v1")
os.environ.setdefault("BIBLE_API_KEY", "test-key")
os.environ.setdefault("BIBLE_ID", "test-bible")
os.environ["CORS_ORIGINS"] = '["*"]'

from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.profile import Profile


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    # pysqlite's own transaction handling breaks SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    async def _get_test_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def create_profile(session_maker):
    """Insert a profile directly; avoids bcrypt cost in tests that only need a caller."""

    async def _create(display_name: str | None = "Alice", email: str | None = None, avatar_url: str | None = None):
        async with session_maker() as session:
            profile = Profile(
                email=email or f"{uuid4().hex[:12]}@example.com",
                password_hash="not-a-real-hash",
                display_name=display_name,
                avatar_url=avatar_url,
            )
            session.add(profile)
            await session.commit()
            await session.refresh(profile)
            return profile

    return _create


def auth_headers(profile: Profile) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(profile.id)}"}


def session_cookie(profile: Profile) -> dict[str, str]:
    return {"Cookie": f"session={create_access_token(profile.id)}"}

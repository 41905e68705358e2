"""
TechNotes Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped, created fresh for each test):
    ├── db_engine: In-memory SQLite engine with the schema created
    ├── db_session: AsyncSession bound to db_engine
    ├── test_app: Fresh FastAPI app whose get_db_session uses db_engine
    ├── test_client: HTTPX AsyncClient talking to test_app
    ├── mock_db_session: Mock session for store-failure paths
    └── make_user / make_note: Insert records directly, bypassing the API
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"  # cheapest cost bcrypt allows
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db_session
from app.main import create_app
from app.models.note import Note
from app.models.user import User
from app.services.password_service import get_password_hash


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest_asyncio.fixture
async def db_engine():
    """
    In-memory SQLite database holding the full schema.

    StaticPool keeps a single connection so every session sees the same
    in-memory database. Foreign keys are switched on so ON DELETE RESTRICT
    behaves like it does in PostgreSQL.

    Every session shares that one connection, and so one transaction: a
    rollback in one request discards writes from any request running
    alongside it. Concurrent-request tests need a file database or
    PostgreSQL instead.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def test_app(session_factory):
    """
    A fresh app per test, so rate-limit state never leaks between tests.

    The session override mirrors app.database.get_db_session: commit on
    success, roll back on error.
    """
    app = create_app()

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    return app


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/users")
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for paths that must not (or cannot) touch a database.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
        with pytest.raises(DatabaseError):
            await user_service.list_users(mock_db_session)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_user(session_factory):
    """Insert and commit a user directly; returns the User with its id."""

    async def _make_user(
        username: str = "alice",
        password: str = "pw1",
        roles: Optional[List[str]] = None,
        active: bool = True,
    ) -> User:
        async with session_factory() as session:
            user = User(
                username=username,
                password=get_password_hash(password),
                roles=roles or ["Employee"],
                active=active,
            )
            session.add(user)
            await session.commit()
            return user

    return _make_user


@pytest.fixture
def make_note(session_factory):
    """Insert and commit a note owned by the given user id."""

    async def _make_note(user_id, title: str = "Fix printer", text: str = "Paper jam") -> Note:
        async with session_factory() as session:
            note = Note(user_id=user_id, title=title, text=text)
            session.add(note)
            await session.commit()
            return note

    return _make_note


@pytest.fixture
def fetch_user(session_factory):
    """Load a user by id in a fresh session (None if it is gone)."""

    async def _fetch_user(user_id) -> Optional[User]:
        async with session_factory() as session:
            return await session.get(User, user_id)

    return _fetch_user

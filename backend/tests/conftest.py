"""Shared test configuration and fixtures.

Each test gets its own database: a SQLite file under ``tmp_path`` by default, or the
server named by ``TEST_DATABASE_URL``. Tables are created per test and the
``db_session`` fixture wraps everything in an outer transaction that rolls back.
"""

import os
from collections.abc import AsyncGenerator

import pytest_asyncio
from factories import headers_for, make_property, make_user
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from staybook.database import Base, build_engine, get_db
from staybook.main import app
from staybook.models.property import Property
from staybook.models.user import User


# ---------------------------------------------------------------------------
# Engine and session
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh schema for the test and drop it afterwards."""
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'staybook_test.db'}"
    engine = build_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: users and a listing
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def host_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, is_host=True, prefix="host")


@pytest_asyncio.fixture
async def guest_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, prefix="guest")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, prefix="other")


@pytest_asyncio.fixture
async def host_headers(host_user: User) -> dict[str, str]:
    return headers_for(host_user)


@pytest_asyncio.fixture
async def guest_headers(guest_user: User) -> dict[str, str]:
    return headers_for(guest_user)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict[str, str]:
    return headers_for(other_user)


@pytest_asyncio.fixture
async def test_property(db_session: AsyncSession, host_user: User) -> Property:
    """A non-instant-book listing at 150.00 per night for up to 4 guests."""
    return await make_property(db_session, host_user)


@pytest_asyncio.fixture
async def instant_property(db_session: AsyncSession, host_user: User) -> Property:
    """An instant-book listing at 200.00 per night for up to 6 guests."""
    return await make_property(
        db_session, host_user, daily_price="200.00", max_guests=6, is_instant_book=True, title="Instant Villa"
    )

"""Pytest fixtures for FarmLink tests.

Service tests run against an in-memory SQLite database (aiosqlite) built
from the ORM metadata; router tests mount a single router on a bare FastAPI
app and stub its service class.
"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import farmlink.models  # noqa: F401  (registers tables and listeners)
from farmlink.clock import DeterministicClock
from farmlink.database.base import Base

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Monday 08:00 UTC, inside the availability submission window
MONDAY_MORNING = datetime(2024, 1, 8, 8, 0, tzinfo=UTC)


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(MONDAY_MORNING)


@pytest_asyncio.fixture
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session on a fresh in-memory database."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(test_engine.sync_engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(test_engine.sync_engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await test_engine.dispose()

"""Service test fixtures — async in-memory DB, repositories and a recording sink.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Repositories receive the test session factory as their session provider
    - The recording sink sees every dispatched notification in order

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for repository tests
      (PostgreSQL-specific features not exercised here)
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from ballotkeeper.db.base import Base
import ballotkeeper.models  # noqa: F401
from ballotkeeper.services.notification_dispatch import (
    InMemoryNotificationSink, NotificationDispatcher,
)
from ballotkeeper.services.sql_repositories import SqlAuditLog, SqlSnapshotRepository


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
def audit_log(test_session_factory) -> SqlAuditLog:
    return SqlAuditLog(test_session_factory)


@pytest.fixture
def snapshots(test_session_factory) -> SqlSnapshotRepository:
    return SqlSnapshotRepository(test_session_factory)


@pytest.fixture
def sink() -> InMemoryNotificationSink:
    return InMemoryNotificationSink()


@pytest.fixture
def dispatcher(sink) -> NotificationDispatcher:
    return NotificationDispatcher([sink])

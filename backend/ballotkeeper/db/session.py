"""Async Session Factory — provides async DB sessions for direct usage.

Invariants:
    - Schema creation goes through Base.metadata so every imported model is included
    - Meant for scripts and test fixtures; long-lived processes use DatabaseSessionManager
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)

from ballotkeeper.db.base import Base
import ballotkeeper.models  # noqa: F401  (registers tables on Base.metadata)


def create_session_factory(
    database_url: str,
) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory for the given database URL."""
    engine = create_async_engine(database_url, echo=False)
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all BallotKeeper tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

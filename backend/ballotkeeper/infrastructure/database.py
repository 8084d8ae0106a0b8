"""Database Session Manager — async engine plus sessions that roll back and map errors.

Invariants:
    - A session that raises is rolled back before the error leaves the context
    - SQLAlchemy exceptions surface as DatabaseError (core/errors.py), never raw
    - Pool sizing only applies to server databases; SQLite keeps SQLAlchemy's default pool

Design Decisions:
    - Module-level db_manager set by init_db(): bootstrap owns the lifetime
    - expire_on_commit=False: snapshot rows are read after commit without a refresh
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from ballotkeeper.core.errors import DatabaseError
from ballotkeeper.db.session import create_schema

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError subclass DBAPIError.
_ERROR_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


def _to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    for exc_type, message, operation in _ERROR_MAP:
        if isinstance(exc, exc_type):
            return DatabaseError(message, operation)
    return DatabaseError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the async engine for the audit log and snapshot store."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        url = make_url(database_url)
        engine_kwargs: dict = {"pool_pre_ping": True}
        if url.get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(
            f"Database engine created for {url.render_as_string(hide_password=True)}",
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session; roll back and raise DatabaseError on any SQLAlchemy failure."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = _to_database_error(e)
            logger.error(
                f"DB {error.operation} failed: {e}",
                extra={"error_code": error.code, "operation": error.operation},
            )
            raise error from e
        finally:
            await session.close()

    async def create_schema(self) -> None:
        await create_schema(self.engine)

    async def health_check(self) -> bool:
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except DatabaseError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    """Create the process-wide manager, replacing any earlier one."""
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager

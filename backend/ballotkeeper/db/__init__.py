"""Database Infrastructure — async session factory and SQLAlchemy Base.

Invariants:
    - All sessions are async (AsyncSession)
    - aiosqlite for embedded/test use, asyncpg for PostgreSQL deployments
"""

"""SQLAlchemy Declarative Base — shared metadata for the audit and snapshot tables.

Invariants:
    - All models inherit from Base
    - Constraint and index names are deterministic (naming_convention), so the same
      schema is produced on SQLite and PostgreSQL
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

"""LedgerSnapshot ORM — latest whole-engine snapshot, one row per engine.

Invariants:
    - engine_name is the primary key: saving overwrites the previous snapshot
    - kind is an EngineKind value and must match the snapshot payload
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from ballotkeeper.db.base import Base


class LedgerSnapshot(Base):
    __tablename__ = "ledger_snapshots"

    engine_name: Mapped[str] = mapped_column(String(100), primary_key=True)
    kind: Mapped[str] = mapped_column(String(30), nullable=False)
    snapshot: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

"""AuditEvent ORM — persisted trail of every emitted notification.

Invariants:
    - Append-only: rows are never updated or deleted
    - id is an autoincrement sequence, so id order is emission order
    - value / previous stored as JSON exactly as Notification.to_dict() renders them
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, Integer, DateTime, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from ballotkeeper.db.base import Base


class AuditEvent(Base):
    """One notification emitted by a successful mutation."""
    __tablename__ = "audit_events"
    __table_args__ = (
        Index("ix_audit_events_engine_scope", "engine_name", "scope"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    engine_name: Mapped[str] = mapped_column(String(100), nullable=False)
    kind: Mapped[str] = mapped_column(String(50), nullable=False)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    scope: Mapped[str | None] = mapped_column(String(200), nullable=True)
    caller: Mapped[str | None] = mapped_column(String(200), nullable=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    previous: Mapped[Any] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "engine_name": self.engine_name,
            "kind": self.kind,
            "subject": self.subject,
            "scope": self.scope,
            "caller": self.caller,
            "value": self.value,
            "previous": self.previous,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

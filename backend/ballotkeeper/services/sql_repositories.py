"""SQL Repositories — SQLAlchemy implementations of the audit log and snapshot store.

Invariants:
    - Each call opens its own session and commits before returning
    - Snapshot save is an upsert keyed by engine_name
    - Audit events are listed in emission (id) order
"""

import logging
from contextlib import AbstractAsyncContextManager
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ballotkeeper.core.notifications import Notification
from ballotkeeper.models.audit_event import AuditEvent
from ballotkeeper.models.ledger_snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)

SessionProvider = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class SqlAuditLog:
    """AuditLogRepository + NotificationSink backed by the audit_events table."""

    def __init__(self, session_provider: SessionProvider):
        self._session_provider = session_provider

    async def publish(self, notification: Notification, engine_name: str) -> None:
        data = notification.to_dict()
        async with self._session_provider() as db:
            db.add(AuditEvent(
                engine_name=engine_name,
                kind=data["kind"],
                subject=data["subject"],
                scope=data["scope"],
                caller=data["caller"],
                value=data["value"],
                previous=data["previous"],
            ))
            await db.commit()

    async def list_events(
        self, engine_name: str, scope: str | None = None, limit: int = 100,
    ) -> list[dict]:
        query = select(AuditEvent).where(AuditEvent.engine_name == engine_name)
        if scope is not None:
            query = query.where(AuditEvent.scope == scope)
        query = query.order_by(AuditEvent.id).limit(limit)
        async with self._session_provider() as db:
            result = await db.execute(query)
            return [event.to_dict() for event in result.scalars().all()]


class SqlSnapshotRepository:
    """SnapshotRepository backed by the ledger_snapshots table."""

    def __init__(self, session_provider: SessionProvider):
        self._session_provider = session_provider

    async def save(self, engine_name: str, kind: str, snapshot: dict) -> None:
        async with self._session_provider() as db:
            row = await db.get(LedgerSnapshot, engine_name)
            if row is None:
                db.add(LedgerSnapshot(engine_name=engine_name, kind=kind, snapshot=snapshot))
            else:
                row.kind = kind
                row.snapshot = snapshot
            await db.commit()
        logger.debug(f"Snapshot saved for engine {engine_name}", extra={"engine": engine_name})

    async def load(self, engine_name: str) -> dict | None:
        async with self._session_provider() as db:
            row = await db.get(LedgerSnapshot, engine_name)
            if row is None:
                return None
            return dict(row.snapshot)

"""Ledger Service — single-writer shell shared by both engine services.

Invariants:
    - One asyncio.Lock per service: mutations never interleave
    - The core operation runs synchronously inside the lock, so no mutation is ever
      observable half-applied by a concurrent reader
    - On a domain error nothing is persisted or dispatched and the error propagates
    - On success: snapshot (if configured), then notification dispatch, both still
      under the lock so observers see emission order
    - A failed snapshot save restores the engine to its state before the operation,
      dispatches nothing and propagates the DatabaseError

Design Decisions:
    - Engine conversion is injected as a to/from snapshot function pair; the same pair
      serves persistence and rollback
"""

import asyncio
import logging
from typing import Callable, Protocol

from ballotkeeper.core.access_control import AccessControl
from ballotkeeper.core.domain_types import EngineKind
from ballotkeeper.core.errors import BallotKeeperError
from ballotkeeper.core.notifications import Notification
from ballotkeeper.core.repository_protocols import SnapshotRepository
from ballotkeeper.services.notification_dispatch import NotificationDispatcher

logger = logging.getLogger(__name__)


class LedgerEngine(Protocol):
    """What the shell needs from either engine variant."""
    kind: EngineKind
    access: AccessControl


ToSnapshot = Callable[[LedgerEngine], dict]
FromSnapshot = Callable[[dict, str], LedgerEngine]


class LedgerService:
    """Base for WorkflowElectionService and MultiElectionService."""

    def __init__(
        self,
        engine: LedgerEngine,
        to_snapshot: ToSnapshot,
        from_snapshot: FromSnapshot,
        name: str = "default",
        dispatcher: NotificationDispatcher | None = None,
        snapshots: SnapshotRepository | None = None,
    ):
        self.engine = engine
        self.name = name
        self.dispatcher = dispatcher or NotificationDispatcher()
        self._to_snapshot = to_snapshot
        self._from_snapshot = from_snapshot
        self._snapshots = snapshots
        self._lock = asyncio.Lock()

    def snapshot(self) -> dict:
        return self._to_snapshot(self.engine)

    async def _apply(
        self, operation: str, caller: str, mutate: Callable[[], Notification],
    ) -> Notification:
        async with self._lock:
            before = self.snapshot() if self._snapshots is not None else None
            try:
                notification = mutate()
            except BallotKeeperError as e:
                logger.warning(
                    f"{operation} rejected: {e.message}",
                    extra={
                        "engine": self.name, "operation": operation,
                        "caller": caller, "error_code": e.code,
                    },
                )
                raise
            if self._snapshots is not None:
                try:
                    await self._snapshots.save(
                        self.name, self.engine.kind.value, self.snapshot(),
                    )
                except Exception as e:
                    self.engine = self._from_snapshot(before, self.engine.access.owner)
                    logger.error(
                        f"{operation} rolled back: snapshot save failed: {e}",
                        extra={
                            "engine": self.name, "operation": operation,
                            "caller": caller,
                            "error_code": getattr(e, "code", None),
                        },
                    )
                    raise
            logger.info(
                f"{operation} accepted",
                extra={
                    "engine": self.name, "operation": operation, "caller": caller,
                    "scope": notification.scope,
                    "notification_kind": notification.kind.value,
                },
            )
            await self.dispatcher.dispatch(notification, self.name)
        return notification

    # --- Roles (shared by both engines) --------------------------------------

    async def transfer_ownership(self, caller: str, new_owner: str) -> Notification:
        return await self._apply(
            "transfer_ownership", caller,
            lambda: self.engine.access.transfer_ownership(caller, new_owner),
        )

    async def set_admin(self, caller: str, identity: str, is_admin: bool) -> Notification:
        return await self._apply(
            "set_admin", caller,
            lambda: self.engine.access.set_admin(caller, identity, is_admin),
        )

    @property
    def owner(self) -> str:
        return self.engine.access.owner

    def is_admin(self, identity: str) -> bool:
        return self.engine.access.is_admin(identity)

"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Clock, notification sinks and persistence are reached only through these types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol where implementations do IO; the clock is synchronous because
      it is read exactly once per operation, before the core runs
"""

from typing import Protocol

from ballotkeeper.core.notifications import Notification


class Clock(Protocol):
    """Timestamp source used only for election window comparisons."""
    def now(self) -> int: ...


class NotificationSink(Protocol):
    """Fire-and-forget observer of emitted notifications."""
    async def publish(self, notification: Notification, engine_name: str) -> None: ...


class AuditLogRepository(NotificationSink, Protocol):
    """Contract for the persisted notification trail, implemented by shell."""
    async def list_events(
        self, engine_name: str, scope: str | None = None, limit: int = 100,
    ) -> list[dict]: ...


class SnapshotRepository(Protocol):
    """Contract for engine snapshot persistence, implemented by shell."""
    async def save(self, engine_name: str, kind: str, snapshot: dict) -> None: ...
    async def load(self, engine_name: str) -> dict | None: ...

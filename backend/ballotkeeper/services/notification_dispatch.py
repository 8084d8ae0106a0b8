"""Notification Dispatch — fan-out of emitted notifications to registered sinks.

Invariants:
    - Sinks receive notifications in emission order
    - Delivery is fire-and-forget: a failing sink is logged and never undoes or
      fails the operation that emitted the notification

Design Decisions:
    - Explicit subscribe() list, no auto-discovery of sinks
"""

import logging

from ballotkeeper.core.notifications import Notification
from ballotkeeper.core.repository_protocols import NotificationSink
from ballotkeeper.schemas.ledger import NotificationEvent

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(self, sinks: list[NotificationSink] | None = None):
        self._sinks: list[NotificationSink] = list(sinks or [])

    def subscribe(self, sink: NotificationSink) -> None:
        self._sinks.append(sink)

    async def dispatch(self, notification: Notification, engine_name: str) -> None:
        for sink in self._sinks:
            try:
                await sink.publish(notification, engine_name)
            except Exception as e:
                logger.error(
                    f"Notification sink {type(sink).__name__} failed: {e}",
                    exc_info=True,
                    extra={
                        "engine": engine_name,
                        "notification_kind": notification.kind.value,
                    },
                )


class InMemoryNotificationSink:
    """Keeps every published notification; used by tests and embedded observers."""

    def __init__(self):
        self.events: list[NotificationEvent] = []

    async def publish(self, notification: Notification, engine_name: str) -> None:
        self.events.append(NotificationEvent.from_notification(notification, engine_name))

    def kinds(self) -> list[str]:
        return [e.kind for e in self.events]

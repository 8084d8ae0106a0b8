"""Notifications — typed records emitted by every successful mutation.

Invariants:
    - Exactly one Notification per successful mutating operation
    - to_dict() is JSON-safe (Enums flattened to their values)
    - Notifications are immutable once built
"""

from dataclasses import dataclass
from enum import Enum


class NotificationKind(str, Enum):
    OWNERSHIP_TRANSFERRED = "ownership_transferred"
    ADMIN_CHANGED = "admin_changed"
    PARTICIPANT_REGISTERED = "participant_registered"
    PARTICIPANT_STATUS_CHANGED = "participant_status_changed"
    BALLOT_ITEM_REGISTERED = "ballot_item_registered"
    BALLOT_ITEM_STATUS_CHANGED = "ballot_item_status_changed"
    WORKFLOW_STATUS_CHANGED = "workflow_status_changed"
    ELECTION_CREATED = "election_created"
    ELECTION_UPDATED = "election_updated"
    ELECTION_ACTIVATION_CHANGED = "election_activation_changed"
    VOTE_CAST = "vote_cast"
    RESULTS_TALLIED = "results_tallied"


def _plain(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(frozen=True)
class Notification:
    """kind + affected id + new value, with the previous value where one exists."""
    kind: NotificationKind
    subject: str
    value: object = None
    previous: object = None
    scope: str | None = None
    caller: str | None = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "subject": self.subject,
            "value": _plain(self.value),
            "previous": _plain(self.previous),
            "scope": self.scope,
            "caller": self.caller,
        }

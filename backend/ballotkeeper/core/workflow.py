"""Workflow State Machine — global phase cursor for the fixed-workflow engine.

Invariants:
    - Strictly forward-only: each status has exactly one legal predecessor
    - No status is skipped or re-entered; VOTES_TALLIED is terminal
    - A rejected transition leaves the cursor unchanged
    - check_transition / check_phase are PURE: error on violation, None on success
"""

from dataclasses import dataclass

from ballotkeeper.core.access_control import AccessControl, check_admin
from ballotkeeper.core.domain_types import WORKFLOW_SEQUENCE, Identity, WorkflowStatus
from ballotkeeper.core.errors import InvalidArgumentError, InvalidPhaseError
from ballotkeeper.core.notifications import Notification, NotificationKind


def required_predecessor(requested: WorkflowStatus) -> WorkflowStatus | None:
    """The single status from which `requested` may be entered (None for the initial one)."""
    index = WORKFLOW_SEQUENCE.index(requested)
    if index == 0:
        return None
    return WORKFLOW_SEQUENCE[index - 1]


def check_phase(current: WorkflowStatus, required: WorkflowStatus) -> InvalidPhaseError | None:
    if current != required:
        return InvalidPhaseError(current.value, required.value)
    return None


def check_transition(
    current: WorkflowStatus, requested: WorkflowStatus,
) -> InvalidPhaseError | None:
    predecessor = required_predecessor(requested)
    if predecessor is None:
        # The initial status is never a transition target.
        return InvalidPhaseError(current.value, "<none>")
    return check_phase(current, predecessor)


def next_status(current: WorkflowStatus, requested: WorkflowStatus) -> WorkflowStatus:
    """Value-level transition function: the new status, or raise InvalidPhaseError."""
    error = check_transition(current, requested)
    if error:
        raise error
    return requested


@dataclass
class WorkflowStateMachine:
    status: WorkflowStatus = WorkflowStatus.REGISTERING_VOTERS

    def gate(self, required: WorkflowStatus):
        """Build an injectable gate that passes only while the cursor is at `required`."""
        return lambda: check_phase(self.status, required)

    def require(self, required: WorkflowStatus) -> None:
        error = check_phase(self.status, required)
        if error:
            raise error

    def advance(
        self, access: AccessControl, caller: Identity, requested: WorkflowStatus | str,
    ) -> Notification:
        error = check_admin(access, caller, "change the workflow status")
        if error:
            raise error
        try:
            requested = WorkflowStatus(requested)
        except ValueError:
            raise InvalidArgumentError(
                f"Unknown workflow status: {requested!r}", "status",
            ) from None

        previous = self.status
        self.status = next_status(previous, requested)
        return Notification(
            kind=NotificationKind.WORKFLOW_STATUS_CHANGED,
            subject="workflow",
            value=self.status,
            previous=previous,
            caller=caller,
        )

"""Participant Registry — voter registration and approval-status lifecycle.

Invariants:
    - A participant is created once and never deleted
    - New and re-submitted registrations are always Pending (re-review is mandatory)
    - Approval may only be set on a registered identity; any status transition is
      allowed in any phase
    - Registration openness is decided by an injected gate, never by ambient state
"""

from dataclasses import dataclass, field
from typing import Callable

from ballotkeeper.core.access_control import AccessControl, check_admin
from ballotkeeper.core.domain_types import (
    ApprovalStatus, ContentHash, Identity, ProposalId, is_null_identity,
)
from ballotkeeper.core.errors import (
    AlreadyRegisteredError, BallotKeeperError, InvalidArgumentError, NotRegisteredError,
)
from ballotkeeper.core.notifications import Notification, NotificationKind

# Returns the error that blocks the operation, or None when it may proceed.
Gate = Callable[[], BallotKeeperError | None]


@dataclass
class Participant:
    identity: Identity
    document_hash: ContentHash
    profile_hash: ContentHash
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    registered: bool = True

    # Fixed-workflow scope
    has_voted: bool = False
    voted_proposal_id: ProposalId | None = None

    # Multi-election scope: election ids this participant has voted in
    voted_elections: set[str] = field(default_factory=set)

    @property
    def is_approved(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED

    def has_voted_in(self, election_id: str) -> bool:
        return election_id in self.voted_elections


def coerce_approval_status(value: ApprovalStatus | str) -> ApprovalStatus:
    try:
        return ApprovalStatus(value)
    except ValueError:
        raise InvalidArgumentError(f"Unknown approval status: {value!r}", "status") from None


class ParticipantRegistry:
    """Identity -> Participant records, gated by AccessControl and an optional phase gate."""

    def __init__(self, access: AccessControl, registration_gate: Gate | None = None):
        self._access = access
        self._registration_gate = registration_gate
        self.participants: dict[Identity, Participant] = {}

    def get(self, identity: str) -> Participant | None:
        return self.participants.get(identity)

    def require(self, identity: str) -> Participant:
        participant = self.participants.get(identity)
        if participant is None:
            raise NotRegisteredError(identity)
        return participant

    def is_registered(self, identity: str) -> bool:
        return identity in self.participants

    def register(
        self, caller: Identity, document_hash: ContentHash, profile_hash: ContentHash,
    ) -> Notification:
        if self._registration_gate:
            error = self._registration_gate()
            if error:
                raise error
        if is_null_identity(caller):
            raise InvalidArgumentError("Caller cannot be the null identity", "caller")
        if caller in self.participants:
            raise AlreadyRegisteredError(caller)

        self.participants[caller] = Participant(
            identity=caller, document_hash=document_hash, profile_hash=profile_hash,
        )
        return Notification(
            kind=NotificationKind.PARTICIPANT_REGISTERED,
            subject=caller,
            value=ApprovalStatus.PENDING,
            caller=caller,
        )

    def update(
        self, caller: Identity, document_hash: ContentHash, profile_hash: ContentHash,
    ) -> Notification:
        participant = self.require(caller)

        previous = participant.approval_status
        participant.document_hash = document_hash
        participant.profile_hash = profile_hash
        participant.approval_status = ApprovalStatus.PENDING
        return Notification(
            kind=NotificationKind.PARTICIPANT_STATUS_CHANGED,
            subject=caller,
            value=ApprovalStatus.PENDING,
            previous=previous,
            caller=caller,
        )

    def approve_reject(
        self, caller: Identity, target: Identity, status: ApprovalStatus | str,
    ) -> Notification:
        error = check_admin(self._access, caller, "approve or reject participants")
        if error:
            raise error
        status = coerce_approval_status(status)
        participant = self.require(target)

        previous = participant.approval_status
        participant.approval_status = status
        return Notification(
            kind=NotificationKind.PARTICIPANT_STATUS_CHANGED,
            subject=target,
            value=status,
            previous=previous,
            caller=caller,
        )

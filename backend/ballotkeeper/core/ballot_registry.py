"""Ballot Registry — proposal registration, approval, and per-item vote counters.

Invariants:
    - Ids are sequential from 1, strictly increasing, never reused
    - approved_ids is the ordered index of Approved items, maintained on every
      status change (no full-range rescans)
    - vote_count only increases, by exactly 1 per admitted vote
    - update rewrites every metadata field and resets approval to Pending
"""

from bisect import insort
from dataclasses import dataclass

from ballotkeeper.core.access_control import AccessControl, check_admin
from ballotkeeper.core.domain_types import (
    FIRST_PROPOSAL_ID, ApprovalStatus, ContentHash, Identity, ProposalId, VotingStatus,
)
from ballotkeeper.core.errors import InvalidArgumentError, InvalidTargetError
from ballotkeeper.core.notifications import Notification, NotificationKind
from ballotkeeper.core.participant_registry import Gate, coerce_approval_status


@dataclass
class BallotItem:
    id: ProposalId
    name: str
    document_hash: ContentHash
    profile_hash: ContentHash
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    vote_count: int = 0
    voting_status: VotingStatus = VotingStatus.PENDING

    @property
    def is_approved(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED


class BallotRegistry:
    """Numbered ballot items for the fixed-workflow engine."""

    def __init__(self, access: AccessControl, registration_gate: Gate | None = None):
        self._access = access
        self._registration_gate = registration_gate
        self.items: dict[ProposalId, BallotItem] = {}
        self.next_id: ProposalId = FIRST_PROPOSAL_ID
        self.approved_ids: list[ProposalId] = []
        self.completed_ids: list[ProposalId] = []

    def get(self, item_id: int) -> BallotItem | None:
        return self.items.get(item_id)

    def require(self, item_id: int) -> BallotItem:
        item = self.items.get(item_id)
        if item is None:
            raise InvalidTargetError("Proposal", item_id)
        return item

    def approved_items(self) -> list[BallotItem]:
        return [self.items[i] for i in self.approved_ids]

    def completed_items(self) -> list[BallotItem]:
        return [self.items[i] for i in self.completed_ids]

    # --- Mutations ------------------------------------------------------------

    def register_item(
        self,
        caller: Identity,
        name: str,
        document_hash: ContentHash,
        profile_hash: ContentHash,
    ) -> Notification:
        error = check_admin(self._access, caller, "register proposals")
        if error:
            raise error
        if self._registration_gate:
            error = self._registration_gate()
            if error:
                raise error
        _check_name(name)

        item_id = self.next_id
        self.items[item_id] = BallotItem(
            id=item_id, name=name.strip(),
            document_hash=document_hash, profile_hash=profile_hash,
        )
        self.next_id = ProposalId(item_id + 1)
        return Notification(
            kind=NotificationKind.BALLOT_ITEM_REGISTERED,
            subject=str(item_id),
            value=name.strip(),
            caller=caller,
        )

    def update(
        self,
        caller: Identity,
        item_id: int,
        name: str,
        document_hash: ContentHash,
        profile_hash: ContentHash,
    ) -> Notification:
        error = check_admin(self._access, caller, "update proposals")
        if error:
            raise error
        item = self.require(item_id)
        _check_name(name)

        previous = item.approval_status
        item.name = name.strip()
        item.document_hash = document_hash
        item.profile_hash = profile_hash
        self._set_status(item, ApprovalStatus.PENDING)
        return Notification(
            kind=NotificationKind.BALLOT_ITEM_STATUS_CHANGED,
            subject=str(item_id),
            value=ApprovalStatus.PENDING,
            previous=previous,
            caller=caller,
        )

    def approve_reject(
        self, caller: Identity, item_id: int, status: ApprovalStatus | str,
    ) -> Notification:
        error = check_admin(self._access, caller, "approve or reject proposals")
        if error:
            raise error
        status = coerce_approval_status(status)
        item = self.require(item_id)

        previous = item.approval_status
        self._set_status(item, status)
        return Notification(
            kind=NotificationKind.BALLOT_ITEM_STATUS_CHANGED,
            subject=str(item_id),
            value=status,
            previous=previous,
            caller=caller,
        )

    def record_vote(self, item_id: ProposalId) -> int:
        """Increment one counter. Callers validate eligibility first."""
        item = self.items[item_id]
        item.vote_count += 1
        return item.vote_count

    def mark_completed(self) -> list[ProposalId]:
        """Freeze the currently Approved items as the tallied session."""
        for item_id in self.approved_ids:
            self.items[item_id].voting_status = VotingStatus.COMPLETED
        self.completed_ids = list(self.approved_ids)
        return self.completed_ids

    def _set_status(self, item: BallotItem, status: ApprovalStatus) -> None:
        was_approved = item.is_approved
        item.approval_status = status
        if status == ApprovalStatus.APPROVED and not was_approved:
            insort(self.approved_ids, item.id)
        elif status != ApprovalStatus.APPROVED and was_approved:
            self.approved_ids.remove(item.id)


def _check_name(name: str) -> None:
    if not name or not name.strip():
        raise InvalidArgumentError("Proposal name cannot be empty", "name")

"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Identity is opaque: only equality is ever used
    - Proposal ids start at 1; 0 is reserved as the "no winner" sentinel
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (snapshots, audit log)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

Identity = NewType("Identity", str)
ContentHash = NewType("ContentHash", str)
ProposalId = NewType("ProposalId", int)
ElectionId = NewType("ElectionId", str)
CandidateId = NewType("CandidateId", str)
Timestamp = NewType("Timestamp", int)   # unix seconds

ZERO_ADDRESS = Identity("0x0000000000000000000000000000000000000000")
NULL_IDENTITIES = frozenset({Identity(""), ZERO_ADDRESS})

FIRST_PROPOSAL_ID = ProposalId(1)
NO_WINNER = ProposalId(0)


def is_null_identity(identity: str | None) -> bool:
    """True for the empty identity, the zero address, or None."""
    return identity is None or identity in NULL_IDENTITIES


# ─── Enums ───────────────────────────────────────────────────────

class ApprovalStatus(str, Enum):
    """Approval gate for participants and ballot items."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VotingStatus(str, Enum):
    """Whether a ballot item belongs to a tallied voting session."""
    PENDING = "pending"
    COMPLETED = "completed"


class WorkflowStatus(str, Enum):
    """Global phase cursor of the fixed-workflow engine."""
    REGISTERING_VOTERS = "registering_voters"
    PROPOSALS_REGISTRATION_STARTED = "proposals_registration_started"
    PROPOSALS_REGISTRATION_ENDED = "proposals_registration_ended"
    VOTING_SESSION_STARTED = "voting_session_started"
    VOTING_SESSION_ENDED = "voting_session_ended"
    VOTES_TALLIED = "votes_tallied"


WORKFLOW_SEQUENCE: tuple[WorkflowStatus, ...] = (
    WorkflowStatus.REGISTERING_VOTERS,
    WorkflowStatus.PROPOSALS_REGISTRATION_STARTED,
    WorkflowStatus.PROPOSALS_REGISTRATION_ENDED,
    WorkflowStatus.VOTING_SESSION_STARTED,
    WorkflowStatus.VOTING_SESSION_ENDED,
    WorkflowStatus.VOTES_TALLIED,
)


class EngineKind(str, Enum):
    """The two engine variants; used to tag persisted snapshots."""
    FIXED_WORKFLOW = "fixed_workflow"
    MULTI_ELECTION = "multi_election"

"""Ledger Views — snapshots of participants, ballot items, elections and results.

Invariants:
    - Every view is built from current engine state at read time
    - ElectionView.is_votable is computed from the clock reading passed in, never stored
    - WorkflowResult.has_winner is False exactly when proposal_id is the NO_WINNER sentinel
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ballotkeeper.core.ballot_registry import BallotItem
from ballotkeeper.core.domain_types import (
    NO_WINNER, ApprovalStatus, VotingStatus, WorkflowStatus,
)
from ballotkeeper.core.election_scheduler import Election
from ballotkeeper.core.notifications import Notification
from ballotkeeper.core.participant_registry import Participant


class ParticipantView(BaseModel):
    model_config = ConfigDict(frozen=True)

    identity: str
    registered: bool
    approval_status: ApprovalStatus
    document_hash: str
    profile_hash: str
    has_voted: bool = False
    voted_proposal_id: int | None = None
    voted_elections: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, p: Participant) -> "ParticipantView":
        return cls(
            identity=p.identity,
            registered=p.registered,
            approval_status=p.approval_status,
            document_hash=p.document_hash,
            profile_hash=p.profile_hash,
            has_voted=p.has_voted,
            voted_proposal_id=p.voted_proposal_id,
            voted_elections=sorted(p.voted_elections),
        )


class BallotItemView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    document_hash: str
    profile_hash: str
    approval_status: ApprovalStatus
    vote_count: int
    voting_status: VotingStatus

    @classmethod
    def from_domain(cls, item: BallotItem) -> "BallotItemView":
        return cls(
            id=item.id,
            name=item.name,
            document_hash=item.document_hash,
            profile_hash=item.profile_hash,
            approval_status=item.approval_status,
            vote_count=item.vote_count,
            voting_status=item.voting_status,
        )


class ElectionView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    creator: str
    title: str
    start_time: int
    end_time: int
    is_active: bool
    is_votable: bool
    candidate_ids: list[str]
    vote_counts: dict[str, int]
    total_votes: int
    winning_candidate_id: str | None
    results_tallied: bool

    @classmethod
    def from_domain(cls, e: Election, now: int) -> "ElectionView":
        return cls(
            id=e.id,
            creator=e.creator,
            title=e.title,
            start_time=e.start_time,
            end_time=e.end_time,
            is_active=e.is_active,
            is_votable=e.is_votable(now),
            candidate_ids=list(e.candidate_ids),
            vote_counts={cid: e.vote_counts[cid] for cid in e.candidate_ids},
            total_votes=e.total_votes,
            winning_candidate_id=e.winning_candidate_id,
            results_tallied=e.results_tallied,
        )


class WorkflowResult(BaseModel):
    status: WorkflowStatus
    proposal_id: int
    vote_count: int
    total_votes: int

    @property
    def has_winner(self) -> bool:
        return self.proposal_id != NO_WINNER


class ElectionResult(BaseModel):
    election_id: str
    winning_candidate_id: str | None
    vote_count: int
    total_votes: int


class NotificationEvent(BaseModel):
    """Wire shape of a Notification, tagged with the emitting engine."""
    engine_name: str
    kind: str
    subject: str
    value: Any = None
    previous: Any = None
    scope: str | None = None
    caller: str | None = None

    @classmethod
    def from_notification(cls, n: Notification, engine_name: str) -> "NotificationEvent":
        return cls(engine_name=engine_name, **n.to_dict())

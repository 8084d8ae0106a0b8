"""Vote Ledger — vote admission, double-vote prevention, tally and winner lookup.

Invariants:
    - Every admission check runs against current state before anything is mutated;
      a rejected vote changes no flag and no counter
    - The has-voted flag and the counters change together in one step
    - sum(per-item counts) == total_votes for every scope
    - Winner scans overwrite the running winner only on a strictly greater count,
      so the first-seen candidate (lowest id) wins ties
    - Multi-election tally is a one-way latch, only after end_time

Design Decisions:
    - One ledger class per engine variant; both share select_winner
"""

from typing import Iterable, TypeVar

from ballotkeeper.core.access_control import AccessControl
from ballotkeeper.core.ballot_registry import BallotRegistry
from ballotkeeper.core.domain_types import (
    NO_WINNER, Identity, ProposalId, Timestamp, WorkflowStatus,
)
from ballotkeeper.core.election_scheduler import ElectionScheduler
from ballotkeeper.core.errors import (
    AlreadyTalliedError, AlreadyVotedError, InvalidTargetError, NotApprovedError,
    NotTalliedYetError, NotVotableError, TooEarlyError, UnauthorizedError,
)
from ballotkeeper.core.notifications import Notification, NotificationKind
from ballotkeeper.core.participant_registry import ParticipantRegistry
from ballotkeeper.core.workflow import WorkflowStateMachine

K = TypeVar("K")

WORKFLOW_SCOPE = "workflow"


def select_winner(tallies: Iterable[tuple[K, int]], default: K) -> tuple[K, int]:
    """Strictly-highest count; ties keep the first seen. All-zero returns `default`."""
    winner, best = default, 0
    for key, count in tallies:
        if count > best:
            winner, best = key, count
    return winner, best


class WorkflowVoteLedger:
    """Single global scope, gated by the workflow cursor and voter approval."""

    def __init__(
        self,
        access: AccessControl,
        workflow: WorkflowStateMachine,
        participants: ParticipantRegistry,
        ballots: BallotRegistry,
    ):
        self._access = access
        self._workflow = workflow
        self._participants = participants
        self._ballots = ballots
        self.total_votes = 0

    def vote(self, caller: Identity, proposal_id: int) -> Notification:
        self._workflow.require(WorkflowStatus.VOTING_SESSION_STARTED)
        voter = self._participants.require(caller)
        if not voter.is_approved:
            raise NotApprovedError(caller)
        if voter.has_voted:
            raise AlreadyVotedError(caller, WORKFLOW_SCOPE)
        item = self._ballots.get(proposal_id)
        if item is None or not item.is_approved:
            raise InvalidTargetError("Proposal", proposal_id)

        voter.has_voted = True
        voter.voted_proposal_id = item.id
        count = self._ballots.record_vote(item.id)
        self.total_votes += 1
        return Notification(
            kind=NotificationKind.VOTE_CAST,
            subject=str(item.id),
            value=count,
            scope=WORKFLOW_SCOPE,
            caller=caller,
        )

    def tally(self, caller: Identity) -> Notification:
        """Close the session: cursor -> VOTES_TALLIED, approved items -> Completed."""
        notification = self._workflow.advance(
            self._access, caller, WorkflowStatus.VOTES_TALLIED,
        )
        self._ballots.mark_completed()
        return notification

    def get_winner(self) -> ProposalId:
        return self.get_winner_with_count()[0]

    def get_winner_with_count(self) -> tuple[ProposalId, int]:
        if self._workflow.status != WorkflowStatus.VOTES_TALLIED:
            raise NotTalliedYetError(WORKFLOW_SCOPE)
        return select_winner(
            ((item.id, item.vote_count) for item in self._ballots.completed_items()),
            NO_WINNER,
        )


class ElectionVoteLedger:
    """Per-election scopes, gated by each election's activity flag and time window."""

    def __init__(
        self,
        access: AccessControl,
        participants: ParticipantRegistry,
        scheduler: ElectionScheduler,
    ):
        self._access = access
        self._participants = participants
        self._scheduler = scheduler

    def vote(
        self, caller: Identity, election_id: str, candidate_id: str, now: Timestamp,
    ) -> Notification:
        election = self._scheduler.require(election_id)
        if not election.is_votable(now):
            raise NotVotableError(election_id)
        voter = self._participants.require(caller)
        if voter.has_voted_in(election_id):
            raise AlreadyVotedError(caller, election_id)
        if not election.has_candidate(candidate_id):
            raise InvalidTargetError("Candidate", candidate_id)

        voter.voted_elections.add(election_id)
        election.vote_counts[candidate_id] += 1
        election.total_votes += 1
        return Notification(
            kind=NotificationKind.VOTE_CAST,
            subject=candidate_id,
            value=election.vote_counts[candidate_id],
            scope=election_id,
            caller=caller,
        )

    def tally(self, caller: Identity, election_id: str, now: Timestamp) -> Notification:
        election = self._scheduler.require(election_id)
        if not self._scheduler.can_manage(election, caller):
            raise UnauthorizedError("tally this election", caller)
        if election.results_tallied:
            raise AlreadyTalliedError(election_id)
        if now <= election.end_time:
            raise TooEarlyError(election_id, election.end_time)

        winner, _ = select_winner(
            ((cid, election.vote_counts[cid]) for cid in election.candidate_ids),
            None,
        )
        election.winning_candidate_id = winner
        election.results_tallied = True
        return Notification(
            kind=NotificationKind.RESULTS_TALLIED,
            subject=election_id,
            value=winner,
            scope=election_id,
            caller=caller,
        )

    def get_winner(self, election_id: str) -> tuple[str | None, int]:
        """Stored winner and its count; (None, 0) when no vote was cast."""
        election = self._scheduler.require(election_id)
        if not election.results_tallied:
            raise NotTalliedYetError(election_id)
        winner = election.winning_candidate_id
        if winner is None:
            return None, 0
        return winner, election.vote_counts[winner]

    def get_vote_counts(self, election_id: str) -> dict[str, int]:
        election = self._scheduler.require(election_id)
        return {cid: election.vote_counts[cid] for cid in election.candidate_ids}

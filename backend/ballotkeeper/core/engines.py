"""Engines — the two aggregate roots wiring components into one serialized state.

Invariants:
    - Each engine owns exactly one instance of each of its components
    - Fixed-workflow gates are injected from the WorkflowStateMachine, never global
    - Multi-election registration is always open (no gate)
    - Engines are pure state + operations: the clock reading is a parameter
"""

from ballotkeeper.core.access_control import AccessControl
from ballotkeeper.core.ballot_registry import BallotRegistry
from ballotkeeper.core.domain_types import EngineKind, Identity, WorkflowStatus
from ballotkeeper.core.election_scheduler import ElectionScheduler
from ballotkeeper.core.notifications import Notification
from ballotkeeper.core.participant_registry import ParticipantRegistry
from ballotkeeper.core.vote_ledger import ElectionVoteLedger, WorkflowVoteLedger
from ballotkeeper.core.workflow import WorkflowStateMachine


class FixedWorkflowEngine:
    """One global election advancing through the six-phase workflow."""

    kind = EngineKind.FIXED_WORKFLOW

    def __init__(self, owner: Identity):
        self.access = AccessControl(owner=owner)
        self.workflow = WorkflowStateMachine()
        self.participants = ParticipantRegistry(
            self.access,
            registration_gate=self.workflow.gate(WorkflowStatus.REGISTERING_VOTERS),
        )
        self.ballots = BallotRegistry(
            self.access,
            registration_gate=self.workflow.gate(
                WorkflowStatus.PROPOSALS_REGISTRATION_STARTED,
            ),
        )
        self.ledger = WorkflowVoteLedger(
            self.access, self.workflow, self.participants, self.ballots,
        )

    @property
    def status(self) -> WorkflowStatus:
        return self.workflow.status

    # --- Phase transitions ----------------------------------------------------

    def start_proposals_registration(self, caller: Identity) -> Notification:
        return self.workflow.advance(
            self.access, caller, WorkflowStatus.PROPOSALS_REGISTRATION_STARTED,
        )

    def end_proposals_registration(self, caller: Identity) -> Notification:
        return self.workflow.advance(
            self.access, caller, WorkflowStatus.PROPOSALS_REGISTRATION_ENDED,
        )

    def start_voting_session(self, caller: Identity) -> Notification:
        return self.workflow.advance(
            self.access, caller, WorkflowStatus.VOTING_SESSION_STARTED,
        )

    def end_voting_session(self, caller: Identity) -> Notification:
        return self.workflow.advance(
            self.access, caller, WorkflowStatus.VOTING_SESSION_ENDED,
        )

    def tally_votes(self, caller: Identity) -> Notification:
        return self.ledger.tally(caller)


class MultiElectionEngine:
    """Many independently scheduled elections under one registry."""

    kind = EngineKind.MULTI_ELECTION

    def __init__(self, owner: Identity):
        self.access = AccessControl(owner=owner)
        self.participants = ParticipantRegistry(self.access)
        self.scheduler = ElectionScheduler(self.access, self.participants)
        self.ledger = ElectionVoteLedger(self.access, self.participants, self.scheduler)

"""Workflow Election Service — async facade over the FixedWorkflowEngine.

Invariants:
    - Mutations go through LedgerService._apply (serialized, logged, dispatched)
    - Reads return pydantic views, never live engine objects
    - get_winner reports NO_WINNER (0) when no completed proposal received a vote
"""

import logging

from ballotkeeper.core.domain_types import ApprovalStatus, WorkflowStatus
from ballotkeeper.core.engine_snapshot import (
    workflow_engine_from_snapshot, workflow_engine_to_snapshot,
)
from ballotkeeper.core.engines import FixedWorkflowEngine
from ballotkeeper.core.notifications import Notification
from ballotkeeper.core.repository_protocols import SnapshotRepository
from ballotkeeper.schemas.ledger import BallotItemView, ParticipantView, WorkflowResult
from ballotkeeper.services.ledger_service import LedgerService
from ballotkeeper.services.notification_dispatch import NotificationDispatcher

logger = logging.getLogger(__name__)


class WorkflowElectionService(LedgerService):
    engine: FixedWorkflowEngine

    def __init__(
        self,
        engine: FixedWorkflowEngine,
        name: str = "default",
        dispatcher: NotificationDispatcher | None = None,
        snapshots: SnapshotRepository | None = None,
    ):
        super().__init__(
            engine, workflow_engine_to_snapshot, workflow_engine_from_snapshot,
            name=name, dispatcher=dispatcher, snapshots=snapshots,
        )

    @classmethod
    async def restore(
        cls,
        name: str,
        owner: str,
        snapshots: SnapshotRepository,
        dispatcher: NotificationDispatcher | None = None,
    ) -> "WorkflowElectionService":
        """Rebuild from the latest persisted snapshot, or start fresh with `owner`."""
        data = await snapshots.load(name)
        engine = workflow_engine_from_snapshot(data or {}, owner=owner)
        logger.info(
            f"Workflow engine {'restored' if data else 'created'}",
            extra={"engine": name},
        )
        return cls(engine, name=name, dispatcher=dispatcher, snapshots=snapshots)

    # --- Voters -----------------------------------------------------------------

    async def register_voter(
        self, caller: str, document_hash: str, profile_hash: str,
    ) -> Notification:
        return await self._apply(
            "register_voter", caller,
            lambda: self.engine.participants.register(caller, document_hash, profile_hash),
        )

    async def update_voter(
        self, caller: str, document_hash: str, profile_hash: str,
    ) -> Notification:
        return await self._apply(
            "update_voter", caller,
            lambda: self.engine.participants.update(caller, document_hash, profile_hash),
        )

    async def approve_reject_voter(
        self, caller: str, voter: str, status: ApprovalStatus | str,
    ) -> Notification:
        return await self._apply(
            "approve_reject_voter", caller,
            lambda: self.engine.participants.approve_reject(caller, voter, status),
        )

    # --- Proposals --------------------------------------------------------------

    async def register_proposal(
        self, caller: str, name: str, document_hash: str, profile_hash: str,
    ) -> Notification:
        return await self._apply(
            "register_proposal", caller,
            lambda: self.engine.ballots.register_item(
                caller, name, document_hash, profile_hash,
            ),
        )

    async def update_proposal(
        self, caller: str, proposal_id: int, name: str, document_hash: str, profile_hash: str,
    ) -> Notification:
        return await self._apply(
            "update_proposal", caller,
            lambda: self.engine.ballots.update(
                caller, proposal_id, name, document_hash, profile_hash,
            ),
        )

    async def approve_reject_proposal(
        self, caller: str, proposal_id: int, status: ApprovalStatus | str,
    ) -> Notification:
        return await self._apply(
            "approve_reject_proposal", caller,
            lambda: self.engine.ballots.approve_reject(caller, proposal_id, status),
        )

    # --- Workflow ---------------------------------------------------------------

    async def start_proposals_registration(self, caller: str) -> Notification:
        return await self._apply(
            "start_proposals_registration", caller,
            lambda: self.engine.start_proposals_registration(caller),
        )

    async def end_proposals_registration(self, caller: str) -> Notification:
        return await self._apply(
            "end_proposals_registration", caller,
            lambda: self.engine.end_proposals_registration(caller),
        )

    async def start_voting_session(self, caller: str) -> Notification:
        return await self._apply(
            "start_voting_session", caller,
            lambda: self.engine.start_voting_session(caller),
        )

    async def end_voting_session(self, caller: str) -> Notification:
        return await self._apply(
            "end_voting_session", caller,
            lambda: self.engine.end_voting_session(caller),
        )

    async def vote(self, caller: str, proposal_id: int) -> Notification:
        return await self._apply(
            "vote", caller, lambda: self.engine.ledger.vote(caller, proposal_id),
        )

    async def tally_votes(self, caller: str) -> Notification:
        return await self._apply(
            "tally_votes", caller, lambda: self.engine.tally_votes(caller),
        )

    # --- Reads ------------------------------------------------------------------

    @property
    def status(self) -> WorkflowStatus:
        return self.engine.status

    @property
    def total_votes(self) -> int:
        return self.engine.ledger.total_votes

    def get_voter(self, identity: str) -> ParticipantView:
        return ParticipantView.from_domain(self.engine.participants.require(identity))

    def get_proposal(self, proposal_id: int) -> BallotItemView:
        return BallotItemView.from_domain(self.engine.ballots.require(proposal_id))

    def list_proposals(self) -> list[BallotItemView]:
        return [BallotItemView.from_domain(i) for i in self.engine.ballots.items.values()]

    def list_approved_proposals(self) -> list[BallotItemView]:
        return [BallotItemView.from_domain(i) for i in self.engine.ballots.approved_items()]

    def get_winner(self) -> WorkflowResult:
        proposal_id, count = self.engine.ledger.get_winner_with_count()
        return WorkflowResult(
            status=self.engine.status,
            proposal_id=proposal_id,
            vote_count=count,
            total_votes=self.engine.ledger.total_votes,
        )

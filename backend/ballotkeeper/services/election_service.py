"""Multi-Election Service — async facade over the MultiElectionEngine.

Invariants:
    - The clock is read exactly once per operation, inside the writer lock
    - Registration is always open; voting has no approval gate beyond registration
    - Reads compute is_votable from a fresh clock reading
"""

import logging

from ballotkeeper.core.domain_types import ApprovalStatus
from ballotkeeper.core.engine_snapshot import (
    election_engine_from_snapshot, election_engine_to_snapshot,
)
from ballotkeeper.core.engines import MultiElectionEngine
from ballotkeeper.core.notifications import Notification
from ballotkeeper.core.repository_protocols import Clock, SnapshotRepository
from ballotkeeper.infrastructure.clock import SystemClock
from ballotkeeper.schemas.ledger import ElectionResult, ElectionView, ParticipantView
from ballotkeeper.services.ledger_service import LedgerService
from ballotkeeper.services.notification_dispatch import NotificationDispatcher

logger = logging.getLogger(__name__)


class MultiElectionService(LedgerService):
    engine: MultiElectionEngine

    def __init__(
        self,
        engine: MultiElectionEngine,
        name: str = "default",
        dispatcher: NotificationDispatcher | None = None,
        snapshots: SnapshotRepository | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(
            engine, election_engine_to_snapshot, election_engine_from_snapshot,
            name=name, dispatcher=dispatcher, snapshots=snapshots,
        )
        self.clock = clock or SystemClock()

    @classmethod
    async def restore(
        cls,
        name: str,
        owner: str,
        snapshots: SnapshotRepository,
        dispatcher: NotificationDispatcher | None = None,
        clock: Clock | None = None,
    ) -> "MultiElectionService":
        data = await snapshots.load(name)
        engine = election_engine_from_snapshot(data or {}, owner=owner)
        logger.info(
            f"Multi-election engine {'restored' if data else 'created'}",
            extra={"engine": name},
        )
        return cls(engine, name=name, dispatcher=dispatcher, snapshots=snapshots, clock=clock)

    # --- Users ------------------------------------------------------------------

    async def register_user(
        self, caller: str, document_hash: str, profile_hash: str,
    ) -> Notification:
        return await self._apply(
            "register_user", caller,
            lambda: self.engine.participants.register(caller, document_hash, profile_hash),
        )

    async def update_user(
        self, caller: str, document_hash: str, profile_hash: str,
    ) -> Notification:
        return await self._apply(
            "update_user", caller,
            lambda: self.engine.participants.update(caller, document_hash, profile_hash),
        )

    async def approve_reject_user(
        self, caller: str, user: str, status: ApprovalStatus | str,
    ) -> Notification:
        return await self._apply(
            "approve_reject_user", caller,
            lambda: self.engine.participants.approve_reject(caller, user, status),
        )

    # --- Elections --------------------------------------------------------------

    async def create_election(
        self,
        caller: str,
        election_id: str,
        title: str,
        start_time: int,
        end_time: int,
        candidate_ids: list[str],
    ) -> Notification:
        return await self._apply(
            "create_election", caller,
            lambda: self.engine.scheduler.create_election(
                caller, election_id, title, start_time, end_time, candidate_ids,
                now=self.clock.now(),
            ),
        )

    async def update_election(
        self,
        caller: str,
        election_id: str,
        title: str,
        start_time: int,
        end_time: int,
        candidate_ids: list[str],
    ) -> Notification:
        return await self._apply(
            "update_election", caller,
            lambda: self.engine.scheduler.update_election(
                caller, election_id, title, start_time, end_time, candidate_ids,
                now=self.clock.now(),
            ),
        )

    async def set_election_active(
        self, caller: str, election_id: str, active: bool,
    ) -> Notification:
        return await self._apply(
            "set_election_active", caller,
            lambda: self.engine.scheduler.set_active(caller, election_id, active),
        )

    async def vote(self, caller: str, election_id: str, candidate_id: str) -> Notification:
        return await self._apply(
            "vote", caller,
            lambda: self.engine.ledger.vote(
                caller, election_id, candidate_id, now=self.clock.now(),
            ),
        )

    async def tally_results(self, caller: str, election_id: str) -> Notification:
        return await self._apply(
            "tally_results", caller,
            lambda: self.engine.ledger.tally(caller, election_id, now=self.clock.now()),
        )

    # --- Reads ------------------------------------------------------------------

    def get_user(self, identity: str) -> ParticipantView:
        return ParticipantView.from_domain(self.engine.participants.require(identity))

    def get_election(self, election_id: str) -> ElectionView:
        election = self.engine.scheduler.require(election_id)
        return ElectionView.from_domain(election, self.clock.now())

    def list_elections(self) -> list[ElectionView]:
        now = self.clock.now()
        return [ElectionView.from_domain(e, now) for e in self.engine.scheduler.list_elections()]

    def is_votable(self, election_id: str) -> bool:
        return self.engine.scheduler.require(election_id).is_votable(self.clock.now())

    def get_vote_counts(self, election_id: str) -> dict[str, int]:
        return self.engine.ledger.get_vote_counts(election_id)

    def get_winner(self, election_id: str) -> ElectionResult:
        winner, count = self.engine.ledger.get_winner(election_id)
        return ElectionResult(
            election_id=election_id,
            winning_candidate_id=winner,
            vote_count=count,
            total_votes=self.engine.scheduler.require(election_id).total_votes,
        )

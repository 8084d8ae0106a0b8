"""Shared identities, content hashes and a settable clock for tests."""

from ballotkeeper.core.domain_types import ApprovalStatus
from ballotkeeper.core.engines import FixedWorkflowEngine, MultiElectionEngine

OWNER = "0xowner"
ADMIN = "0xadmin"
ALICE = "0xalice"
BOB = "0xbob"
CAROL = "0xcarol"
MALLORY = "0xmallory"

DOC = "QmDocumentHash"
PROFILE = "QmProfileHash"

T0 = 1_000_000


class FakeClock:
    """Settable clock: tests move time explicitly."""

    def __init__(self, now: int = T0):
        self.current = now

    def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> None:
        self.current += seconds


def voting_engine(voters=(ALICE, BOB), proposals=("P1", "P2")) -> FixedWorkflowEngine:
    """FixedWorkflowEngine with approved voters and proposals, voting session open."""
    engine = FixedWorkflowEngine(owner=OWNER)
    for voter in voters:
        engine.participants.register(voter, DOC, PROFILE)
        engine.participants.approve_reject(OWNER, voter, ApprovalStatus.APPROVED)
    engine.start_proposals_registration(OWNER)
    for name in proposals:
        engine.ballots.register_item(OWNER, name, DOC, PROFILE)
    for item_id in list(engine.ballots.items):
        engine.ballots.approve_reject(OWNER, item_id, ApprovalStatus.APPROVED)
    engine.end_proposals_registration(OWNER)
    engine.start_voting_session(OWNER)
    return engine


def election_engine(users=(ALICE, BOB, CAROL)) -> MultiElectionEngine:
    engine = MultiElectionEngine(owner=OWNER)
    for user in users:
        engine.participants.register(user, DOC, PROFILE)
    return engine

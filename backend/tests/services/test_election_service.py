"""MultiElectionService — clock-driven windows, tally latch and views."""

import pytest

from ballotkeeper.core.engines import MultiElectionEngine
from ballotkeeper.core.errors import (
    AlreadyStartedError, AlreadyTalliedError, DatabaseError, NotVotableError, TooEarlyError,
    UnauthorizedError,
)
from ballotkeeper.services.election_service import MultiElectionService

from tests.factories import ALICE, BOB, CAROL, DOC, MALLORY, OWNER, PROFILE, T0


@pytest.fixture
def service(dispatcher, clock) -> MultiElectionService:
    return MultiElectionService(
        MultiElectionEngine(owner=OWNER), name="elections",
        dispatcher=dispatcher, clock=clock,
    )


async def _with_election(service, candidates=("c1", "c2")) -> None:
    for user in (ALICE, BOB, CAROL):
        await service.register_user(user, DOC, PROFILE)
    await service.create_election(ALICE, "e1", "Board", T0 + 100, T0 + 200, list(candidates))


async def test_election_lifecycle(service, clock, sink):
    await _with_election(service)
    with pytest.raises(NotVotableError):
        await service.vote(BOB, "e1", "c1")

    clock.advance(100)
    assert service.is_votable("e1")
    await service.vote(BOB, "e1", "c1")
    await service.vote(CAROL, "e1", "c2")
    await service.vote(ALICE, "e1", "c1")

    with pytest.raises(TooEarlyError):
        await service.tally_results(ALICE, "e1")
    clock.advance(101)
    assert not service.is_votable("e1")
    await service.tally_results(ALICE, "e1")

    result = service.get_winner("e1")
    assert result.winning_candidate_id == "c1"
    assert result.vote_count == 2
    assert result.total_votes == 3
    assert sink.kinds()[-1] == "results_tallied"


async def test_tally_latch(service, clock):
    await _with_election(service)
    clock.advance(201)
    await service.tally_results(OWNER, "e1")
    with pytest.raises(AlreadyTalliedError):
        await service.tally_results(ALICE, "e1")
    assert service.get_winner("e1").winning_candidate_id is None


async def test_update_only_before_start(service, clock):
    await _with_election(service)
    await service.update_election(ALICE, "e1", "Board v2", T0 + 100, T0 + 300, ["x", "y", "z"])
    view = service.get_election("e1")
    assert view.title == "Board v2"
    assert view.vote_counts == {"x": 0, "y": 0, "z": 0}

    clock.advance(100)
    with pytest.raises(AlreadyStartedError):
        await service.update_election(ALICE, "e1", "Late", T0 + 150, T0 + 300, ["x"])


async def test_election_creation_requires_registration(service):
    with pytest.raises(UnauthorizedError):
        await service.create_election(MALLORY, "e1", "Board", T0 + 1, T0 + 2, ["c1"])
    assert service.list_elections() == []


async def test_paused_election_not_votable(service, clock, sink):
    await _with_election(service)
    clock.advance(150)
    await service.set_election_active(ALICE, "e1", False)
    assert not service.get_election("e1").is_votable
    with pytest.raises(NotVotableError):
        await service.vote(BOB, "e1", "c1")
    assert sink.kinds()[-1] == "election_activation_changed"


async def test_views(service, clock):
    await _with_election(service)
    await service.approve_reject_user(OWNER, BOB, "approved")
    clock.advance(100)
    await service.vote(BOB, "e1", "c2")

    user = service.get_user(BOB)
    assert user.voted_elections == ["e1"]
    assert user.approval_status.value == "approved"
    assert service.get_vote_counts("e1") == {"c1": 0, "c2": 1}
    assert [e.id for e in service.list_elections()] == ["e1"]


async def test_restore_resumes_elections(snapshots, clock):
    service = await MultiElectionService.restore("elections", OWNER, snapshots, clock=clock)
    await _with_election(service)
    clock.advance(100)
    await service.vote(BOB, "e1", "c1")

    restored = await MultiElectionService.restore("elections", OWNER, snapshots, clock=clock)
    assert restored.get_vote_counts("e1") == {"c1": 1, "c2": 0}
    assert restored.get_user(BOB).voted_elections == ["e1"]


async def test_failed_snapshot_save_leaves_election_untouched(clock, dispatcher, sink):
    class _BrokenSnapshots:
        async def save(self, engine_name, kind, snapshot):
            raise DatabaseError("connection lost", "execute")

        async def load(self, engine_name):
            return None

    service = MultiElectionService(
        MultiElectionEngine(owner=OWNER), dispatcher=dispatcher, clock=clock,
    )
    await _with_election(service)
    service._snapshots = _BrokenSnapshots()
    clock.advance(100)
    sink.events.clear()

    with pytest.raises(DatabaseError):
        await service.vote(BOB, "e1", "c1")

    assert service.get_vote_counts("e1") == {"c1": 0, "c2": 0}
    assert service.get_user(BOB).voted_elections == []
    assert service.get_election("e1").total_votes == 0
    assert sink.events == []

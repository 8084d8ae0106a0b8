"""Engine snapshot tests — JSON-safe output and faithful reconstruction."""

import json

import pytest

from ballotkeeper.core.domain_types import ZERO_ADDRESS, ApprovalStatus, WorkflowStatus
from ballotkeeper.core.engine_snapshot import (
    election_engine_from_snapshot, election_engine_to_snapshot,
    workflow_engine_from_snapshot, workflow_engine_to_snapshot,
)
from ballotkeeper.core.errors import AlreadyVotedError, InvalidArgumentError

from tests.factories import ADMIN, ALICE, BOB, OWNER, T0, election_engine, voting_engine


def test_workflow_snapshot_is_json_safe_and_restores():
    engine = voting_engine(proposals=("P1", "P2", "P3"))
    engine.access.set_admin(OWNER, ADMIN, True)
    engine.ballots.approve_reject(OWNER, 3, ApprovalStatus.REJECTED)
    engine.ledger.vote(ALICE, 2)

    data = json.loads(json.dumps(workflow_engine_to_snapshot(engine)))
    restored = workflow_engine_from_snapshot(data, owner="0xignored")

    assert restored.access.owner == OWNER
    assert restored.access.admins == {ADMIN}
    assert restored.status == WorkflowStatus.VOTING_SESSION_STARTED
    assert restored.ballots.approved_ids == [1, 2]
    assert restored.ballots.next_id == 4
    assert restored.ballots.get(2).vote_count == 1
    assert restored.ledger.total_votes == 1
    assert restored.participants.get(ALICE).voted_proposal_id == 2


def test_restored_workflow_keeps_enforcing_rules():
    engine = voting_engine()
    engine.ledger.vote(ALICE, 1)
    restored = workflow_engine_from_snapshot(workflow_engine_to_snapshot(engine), OWNER)

    with pytest.raises(AlreadyVotedError):
        restored.ledger.vote(ALICE, 2)
    restored.ledger.vote(BOB, 2)
    restored.end_voting_session(OWNER)
    restored.tally_votes(OWNER)
    assert restored.ledger.get_winner_with_count() == (1, 1)


def test_tallied_workflow_round_trips_completed_ids():
    engine = voting_engine()
    engine.ledger.vote(BOB, 2)
    engine.end_voting_session(OWNER)
    engine.tally_votes(OWNER)

    restored = workflow_engine_from_snapshot(workflow_engine_to_snapshot(engine), OWNER)
    assert restored.ballots.completed_ids == [1, 2]
    assert restored.ledger.get_winner() == 2


def test_empty_snapshot_gives_fresh_engine():
    engine = workflow_engine_from_snapshot({}, OWNER)
    assert engine.status == WorkflowStatus.REGISTERING_VOTERS
    assert engine.access.owner == OWNER
    assert engine.ballots.next_id == 1


def test_kind_mismatch_is_rejected():
    snapshot = election_engine_to_snapshot(election_engine())
    with pytest.raises(InvalidArgumentError):
        workflow_engine_from_snapshot(snapshot, OWNER)
    with pytest.raises(InvalidArgumentError):
        election_engine_from_snapshot(workflow_engine_to_snapshot(voting_engine()), OWNER)


def test_election_snapshot_restores_elections_and_voters():
    engine = election_engine()
    engine.scheduler.create_election(ALICE, "e1", "Board", T0 + 10, T0 + 20, ["c1", "c2"], now=T0)
    engine.ledger.vote(BOB, "e1", "c2", now=T0 + 10)
    engine.ledger.tally(ALICE, "e1", now=T0 + 21)

    data = json.loads(json.dumps(election_engine_to_snapshot(engine)))
    restored = election_engine_from_snapshot(data, OWNER)

    election = restored.scheduler.get("e1")
    assert election.candidate_ids == ["c1", "c2"]
    assert election.vote_counts == {"c1": 0, "c2": 1}
    assert restored.ledger.get_winner("e1") == ("c2", 1)
    assert restored.participants.get(BOB).has_voted_in("e1")
    assert [e.id for e in restored.scheduler.list_elections()] == ["e1"]


@pytest.mark.parametrize("access", [
    {"owner": "", "admins": []},
    {"owner": ZERO_ADDRESS, "admins": []},
    {"owner": OWNER, "admins": [ADMIN, ""]},
])
def test_null_identity_in_snapshot_roles_is_rejected(access):
    workflow = workflow_engine_to_snapshot(voting_engine())
    workflow["access"] = access
    with pytest.raises(InvalidArgumentError):
        workflow_engine_from_snapshot(workflow, OWNER)

    elections = election_engine_to_snapshot(election_engine())
    elections["access"] = access
    with pytest.raises(InvalidArgumentError):
        election_engine_from_snapshot(elections, OWNER)

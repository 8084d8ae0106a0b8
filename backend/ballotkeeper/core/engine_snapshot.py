"""Engine Snapshot — serialization / deserialization for both engine variants.

Invariants:
    - *_to_snapshot produces a JSON-safe dict (no sets, no Enums, string keys only)
    - *_from_snapshot reconstructs an equivalent engine from any valid snapshot
    - Missing keys fall back to freshly-constructed engine defaults
    - Derived indexes (approved_ids) are rebuilt from item state, not trusted from input
    - A restored owner or admin is never the null identity

Design Decisions:
    - Snapshot is whole-engine: the single-writer model makes every snapshot consistent
"""

from ballotkeeper.core.ballot_registry import BallotItem
from ballotkeeper.core.domain_types import (
    ApprovalStatus, EngineKind, ProposalId, VotingStatus, WorkflowStatus, is_null_identity,
)
from ballotkeeper.core.election_scheduler import Election
from ballotkeeper.core.engines import FixedWorkflowEngine, MultiElectionEngine
from ballotkeeper.core.errors import InvalidArgumentError
from ballotkeeper.core.participant_registry import Participant, ParticipantRegistry


# --- Shared pieces ------------------------------------------------------------

def _serialize_access(engine) -> dict:
    return {
        "owner": engine.access.owner,
        "admins": sorted(engine.access.admins),
    }


def _restore_access(engine, data: dict) -> None:
    owner = data.get("owner", engine.access.owner)
    if is_null_identity(owner):
        raise InvalidArgumentError("Snapshot owner cannot be the null identity", "owner")
    admins = set(data.get("admins", []))
    if any(is_null_identity(a) for a in admins):
        raise InvalidArgumentError("Snapshot admins cannot include the null identity", "admins")
    engine.access.owner = owner
    engine.access.admins = admins


def _serialize_participants(registry: ParticipantRegistry) -> list[dict]:
    return [
        {
            "identity": p.identity,
            "document_hash": p.document_hash,
            "profile_hash": p.profile_hash,
            "approval_status": p.approval_status.value,
            "has_voted": p.has_voted,
            "voted_proposal_id": p.voted_proposal_id,
            "voted_elections": sorted(p.voted_elections),
        }
        for p in registry.participants.values()
    ]


def _restore_participants(registry: ParticipantRegistry, rows: list[dict]) -> None:
    for row in rows:
        participant = Participant(
            identity=row["identity"],
            document_hash=row.get("document_hash", ""),
            profile_hash=row.get("profile_hash", ""),
            approval_status=ApprovalStatus(row.get("approval_status", "pending")),
            has_voted=row.get("has_voted", False),
            voted_proposal_id=row.get("voted_proposal_id"),
            voted_elections=set(row.get("voted_elections", [])),
        )
        registry.participants[participant.identity] = participant


def _check_kind(data: dict, expected: EngineKind) -> None:
    kind = data.get("kind", expected.value)
    if kind != expected.value:
        raise InvalidArgumentError(
            f"Snapshot is for a '{kind}' engine, expected '{expected.value}'", "kind",
        )


# --- Fixed workflow -----------------------------------------------------------

def workflow_engine_to_snapshot(engine: FixedWorkflowEngine) -> dict:
    """Serialize a FixedWorkflowEngine. Pure, no IO."""
    return {
        "kind": EngineKind.FIXED_WORKFLOW.value,
        "access": _serialize_access(engine),
        "status": engine.workflow.status.value,
        "participants": _serialize_participants(engine.participants),
        "ballot_items": [
            {
                "id": item.id,
                "name": item.name,
                "document_hash": item.document_hash,
                "profile_hash": item.profile_hash,
                "approval_status": item.approval_status.value,
                "vote_count": item.vote_count,
                "voting_status": item.voting_status.value,
            }
            for item in engine.ballots.items.values()
        ],
        "next_id": engine.ballots.next_id,
        "completed_ids": list(engine.ballots.completed_ids),
        "total_votes": engine.ledger.total_votes,
    }


def workflow_engine_from_snapshot(data: dict, owner: str) -> FixedWorkflowEngine:
    """Reconstruct a FixedWorkflowEngine. `owner` is used when the snapshot has none."""
    engine = FixedWorkflowEngine(owner=owner)
    if not data:
        return engine
    _check_kind(data, EngineKind.FIXED_WORKFLOW)

    _restore_access(engine, data.get("access", {}))
    status = data.get("status")
    if status:
        engine.workflow.status = WorkflowStatus(status)
    _restore_participants(engine.participants, data.get("participants", []))

    ballots = engine.ballots
    for row in data.get("ballot_items", []):
        item = BallotItem(
            id=ProposalId(row["id"]),
            name=row.get("name", ""),
            document_hash=row.get("document_hash", ""),
            profile_hash=row.get("profile_hash", ""),
            approval_status=ApprovalStatus(row.get("approval_status", "pending")),
            vote_count=row.get("vote_count", 0),
            voting_status=VotingStatus(row.get("voting_status", "pending")),
        )
        ballots.items[item.id] = item
    ballots.approved_ids = sorted(i for i, it in ballots.items.items() if it.is_approved)
    ballots.completed_ids = [ProposalId(i) for i in data.get("completed_ids", [])]
    highest = max(ballots.items, default=0)
    ballots.next_id = ProposalId(max(data.get("next_id", 1), highest + 1))
    engine.ledger.total_votes = data.get("total_votes", 0)
    return engine


# --- Multi election -----------------------------------------------------------

def election_engine_to_snapshot(engine: MultiElectionEngine) -> dict:
    """Serialize a MultiElectionEngine. Pure, no IO."""
    scheduler = engine.scheduler
    return {
        "kind": EngineKind.MULTI_ELECTION.value,
        "access": _serialize_access(engine),
        "participants": _serialize_participants(engine.participants),
        "elections": [
            {
                "id": e.id,
                "creator": e.creator,
                "title": e.title,
                "start_time": e.start_time,
                "end_time": e.end_time,
                "candidate_ids": list(e.candidate_ids),
                "is_active": e.is_active,
                "vote_counts": dict(e.vote_counts),
                "total_votes": e.total_votes,
                "winning_candidate_id": e.winning_candidate_id,
                "results_tallied": e.results_tallied,
            }
            for e in scheduler.list_elections()
        ],
    }


def election_engine_from_snapshot(data: dict, owner: str) -> MultiElectionEngine:
    """Reconstruct a MultiElectionEngine. `owner` is used when the snapshot has none."""
    engine = MultiElectionEngine(owner=owner)
    if not data:
        return engine
    _check_kind(data, EngineKind.MULTI_ELECTION)

    _restore_access(engine, data.get("access", {}))
    _restore_participants(engine.participants, data.get("participants", []))

    scheduler = engine.scheduler
    for row in data.get("elections", []):
        candidate_ids = list(row.get("candidate_ids", []))
        counts = row.get("vote_counts", {})
        election = Election(
            id=row["id"],
            creator=row["creator"],
            title=row.get("title", ""),
            start_time=row["start_time"],
            end_time=row["end_time"],
            candidate_ids=candidate_ids,
            is_active=row.get("is_active", True),
            vote_counts={cid: counts.get(cid, 0) for cid in candidate_ids},
            total_votes=row.get("total_votes", 0),
            winning_candidate_id=row.get("winning_candidate_id"),
            results_tallied=row.get("results_tallied", False),
        )
        scheduler.elections[election.id] = election
        scheduler.active_election_ids.append(election.id)
    return engine

"""Error hierarchy — codes, categories and the response envelope."""

from ballotkeeper.core.errors import (
    AlreadyVotedError, BallotKeeperError, DatabaseError, ErrorCategory, ErrorSeverity,
    InvalidPhaseError, NotVotableError, UnauthorizedError,
)


def test_every_domain_error_is_a_ballotkeeper_error():
    assert isinstance(UnauthorizedError("vote", "0xa"), BallotKeeperError)
    assert isinstance(InvalidPhaseError("a", "b"), BallotKeeperError)


def test_unauthorized_records_caller_in_context():
    error = UnauthorizedError("manage admins", "0xmallory")
    assert error.code == "UNAUTHORIZED"
    assert error.category == ErrorCategory.AUTHORIZATION
    assert error.context.caller == "0xmallory"
    assert "manage admins" in error.message


def test_invalid_phase_keeps_current_and_required():
    error = InvalidPhaseError("registering_voters", "voting_session_started")
    assert error.current == "registering_voters"
    assert error.required == "voting_session_started"


def test_scope_is_recorded_for_election_errors():
    assert NotVotableError("e1").context.scope == "e1"
    assert AlreadyVotedError("0xa", "e1").context.scope == "e1"


def test_to_response_envelope():
    response = AlreadyVotedError("0xa", "workflow").to_response()
    body = response["error"]
    assert body["code"] == "ALREADY_VOTED"
    assert body["category"] == "latch"
    assert body["severity"] == "error"
    assert body["context"] == {"caller": "0xa", "scope": "workflow"}
    assert "timestamp" in body


def test_database_error_is_critical():
    error = DatabaseError("boom", "commit")
    assert error.severity == ErrorSeverity.CRITICAL
    assert error.operation == "commit"

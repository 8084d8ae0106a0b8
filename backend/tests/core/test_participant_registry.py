"""Participant Registry — registration, re-submission and approval lifecycle.

Invariants:
    - New registrations are Pending
    - Re-submitting a profile always resets approval to Pending
    - The injected gate decides whether registration is open
"""

import pytest

from ballotkeeper.core.access_control import AccessControl
from ballotkeeper.core.domain_types import ApprovalStatus
from ballotkeeper.core.errors import (
    AlreadyRegisteredError, InvalidArgumentError, InvalidPhaseError,
    NotRegisteredError, UnauthorizedError,
)
from ballotkeeper.core.notifications import NotificationKind
from ballotkeeper.core.participant_registry import ParticipantRegistry

from tests.factories import ADMIN, ALICE, DOC, MALLORY, OWNER, PROFILE


def _registry(gate=None) -> ParticipantRegistry:
    access = AccessControl(owner=OWNER)
    access.set_admin(OWNER, ADMIN, True)
    return ParticipantRegistry(access, registration_gate=gate)


def test_register_creates_pending_participant():
    registry = _registry()
    notification = registry.register(ALICE, DOC, PROFILE)

    participant = registry.get(ALICE)
    assert participant.registered
    assert participant.approval_status == ApprovalStatus.PENDING
    assert participant.has_voted is False
    assert participant.voted_elections == set()
    assert notification.kind == NotificationKind.PARTICIPANT_REGISTERED
    assert notification.subject == ALICE


def test_register_twice_fails():
    registry = _registry()
    registry.register(ALICE, DOC, PROFILE)
    with pytest.raises(AlreadyRegisteredError):
        registry.register(ALICE, "other", "other")
    assert registry.get(ALICE).document_hash == DOC


def test_register_rejects_null_identity():
    with pytest.raises(InvalidArgumentError):
        _registry().register("", DOC, PROFILE)


def test_closed_gate_blocks_registration():
    registry = _registry(gate=lambda: InvalidPhaseError("voting", "registering"))
    with pytest.raises(InvalidPhaseError):
        registry.register(ALICE, DOC, PROFILE)
    assert not registry.is_registered(ALICE)


def test_update_requires_registration():
    with pytest.raises(NotRegisteredError):
        _registry().update(ALICE, DOC, PROFILE)


def test_update_overwrites_metadata_and_resets_to_pending():
    registry = _registry()
    registry.register(ALICE, DOC, PROFILE)
    registry.approve_reject(ADMIN, ALICE, ApprovalStatus.APPROVED)

    notification = registry.update(ALICE, "newdoc", "newprofile")

    participant = registry.get(ALICE)
    assert participant.document_hash == "newdoc"
    assert participant.profile_hash == "newprofile"
    assert participant.approval_status == ApprovalStatus.PENDING
    assert notification.kind == NotificationKind.PARTICIPANT_STATUS_CHANGED
    assert notification.previous == ApprovalStatus.APPROVED


def test_update_is_open_even_when_registration_gate_is_closed():
    registry = _registry()
    registry.register(ALICE, DOC, PROFILE)
    registry._registration_gate = lambda: InvalidPhaseError("voting", "registering")

    registry.update(ALICE, "newdoc", PROFILE)
    assert registry.get(ALICE).document_hash == "newdoc"


@pytest.mark.parametrize("approver", [OWNER, ADMIN])
def test_admin_or_owner_can_approve(approver):
    registry = _registry()
    registry.register(ALICE, DOC, PROFILE)
    registry.approve_reject(approver, ALICE, ApprovalStatus.APPROVED)
    assert registry.get(ALICE).is_approved


def test_non_admin_cannot_approve():
    registry = _registry()
    registry.register(ALICE, DOC, PROFILE)
    with pytest.raises(UnauthorizedError):
        registry.approve_reject(MALLORY, ALICE, ApprovalStatus.APPROVED)
    assert registry.get(ALICE).approval_status == ApprovalStatus.PENDING


def test_approve_unknown_target_fails():
    with pytest.raises(NotRegisteredError):
        _registry().approve_reject(OWNER, ALICE, ApprovalStatus.APPROVED)


def test_approved_can_flip_to_rejected_and_back():
    registry = _registry()
    registry.register(ALICE, DOC, PROFILE)
    registry.approve_reject(OWNER, ALICE, "approved")
    registry.approve_reject(OWNER, ALICE, "rejected")
    assert registry.get(ALICE).approval_status == ApprovalStatus.REJECTED
    registry.approve_reject(OWNER, ALICE, "approved")
    assert registry.get(ALICE).is_approved


def test_unknown_status_string_is_invalid_argument():
    registry = _registry()
    registry.register(ALICE, DOC, PROFILE)
    with pytest.raises(InvalidArgumentError):
        registry.approve_reject(OWNER, ALICE, "maybe")

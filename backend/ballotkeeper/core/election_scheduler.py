"""Election Scheduler — time-windowed elections and their candidate sets.

Invariants:
    - Election ids are unique and supplied by the caller
    - now < start_time < end_time at creation and at every update
    - Candidate ids are unique within an election; there is no per-candidate approval
    - is_votable is recomputed from the clock reading on every call, never cached
    - An election may only be redefined before start_time; redefinition voids all
      counters and the tally latch
    - active_election_ids is append-only, in creation order
"""

from dataclasses import dataclass, field

from ballotkeeper.core.access_control import AccessControl
from ballotkeeper.core.domain_types import Identity, Timestamp
from ballotkeeper.core.errors import (
    AlreadyStartedError, DuplicateIdError, InvalidArgumentError, InvalidTargetError,
    InvalidTimeRangeError, UnauthorizedError,
)
from ballotkeeper.core.notifications import Notification, NotificationKind
from ballotkeeper.core.participant_registry import ParticipantRegistry


@dataclass
class Election:
    id: str
    creator: Identity
    title: str
    start_time: Timestamp
    end_time: Timestamp
    candidate_ids: list[str] = field(default_factory=list)
    is_active: bool = True
    vote_counts: dict[str, int] = field(default_factory=dict)
    total_votes: int = 0
    winning_candidate_id: str | None = None
    results_tallied: bool = False

    def is_votable(self, now: int) -> bool:
        return self.is_active and self.start_time <= now <= self.end_time

    def has_candidate(self, candidate_id: str) -> bool:
        return candidate_id in self.vote_counts

    def reset_results(self) -> None:
        self.vote_counts = {cid: 0 for cid in self.candidate_ids}
        self.total_votes = 0
        self.winning_candidate_id = None
        self.results_tallied = False


# --- Pure validators ----------------------------------------------------------

def check_time_range(start_time: int, end_time: int, now: int) -> InvalidTimeRangeError | None:
    if start_time <= now:
        return InvalidTimeRangeError(
            f"Start time {start_time} must be in the future (now={now})",
        )
    if end_time <= start_time:
        return InvalidTimeRangeError(
            f"End time {end_time} must be after start time {start_time}",
        )
    return None


def check_candidate_ids(
    election_id: str, candidate_ids: list[str],
) -> InvalidArgumentError | DuplicateIdError | None:
    if not candidate_ids:
        return InvalidArgumentError(
            f"Election '{election_id}' needs at least one candidate", "candidate_ids",
        )
    seen: set[str] = set()
    for candidate_id in candidate_ids:
        if not candidate_id:
            return InvalidArgumentError("Candidate id cannot be empty", "candidate_ids")
        if candidate_id in seen:
            return DuplicateIdError("Candidate", candidate_id)
        seen.add(candidate_id)
    return None


def check_title(title: str) -> InvalidArgumentError | None:
    if not title or not title.strip():
        return InvalidArgumentError("Election title cannot be empty", "title")
    return None


# --- Scheduler ----------------------------------------------------------------

class ElectionScheduler:
    """Registry of independently scheduled elections."""

    def __init__(self, access: AccessControl, participants: ParticipantRegistry):
        self._access = access
        self._participants = participants
        self.elections: dict[str, Election] = {}
        self.active_election_ids: list[str] = []

    def get(self, election_id: str) -> Election | None:
        return self.elections.get(election_id)

    def require(self, election_id: str) -> Election:
        election = self.elections.get(election_id)
        if election is None:
            raise InvalidTargetError("Election", election_id)
        return election

    def list_elections(self) -> list[Election]:
        return [self.elections[eid] for eid in self.active_election_ids]

    def can_manage(self, election: Election, caller: str) -> bool:
        return caller == election.creator or self._access.is_admin(caller)

    def create_election(
        self,
        caller: Identity,
        election_id: str,
        title: str,
        start_time: Timestamp,
        end_time: Timestamp,
        candidate_ids: list[str],
        now: Timestamp,
    ) -> Notification:
        if not (self._participants.is_registered(caller) or self._access.is_admin(caller)):
            raise UnauthorizedError("create elections", caller)
        if not election_id:
            raise InvalidArgumentError("Election id cannot be empty", "election_id")
        if election_id in self.elections:
            raise DuplicateIdError("Election", election_id)
        error = (
            check_title(title)
            or check_time_range(start_time, end_time, now)
            or check_candidate_ids(election_id, candidate_ids)
        )
        if error:
            raise error

        election = Election(
            id=election_id,
            creator=caller,
            title=title.strip(),
            start_time=start_time,
            end_time=end_time,
            candidate_ids=list(candidate_ids),
        )
        election.reset_results()
        self.elections[election_id] = election
        self.active_election_ids.append(election_id)
        return Notification(
            kind=NotificationKind.ELECTION_CREATED,
            subject=election_id,
            value=election.title,
            scope=election_id,
            caller=caller,
        )

    def update_election(
        self,
        caller: Identity,
        election_id: str,
        title: str,
        start_time: Timestamp,
        end_time: Timestamp,
        candidate_ids: list[str],
        now: Timestamp,
    ) -> Notification:
        election = self.require(election_id)
        # Started elections are frozen for every caller, whatever their role.
        if now >= election.start_time:
            raise AlreadyStartedError(election_id)
        if not self.can_manage(election, caller):
            raise UnauthorizedError("update this election", caller)
        error = (
            check_title(title)
            or check_time_range(start_time, end_time, now)
            or check_candidate_ids(election_id, candidate_ids)
        )
        if error:
            raise error

        election.title = title.strip()
        election.start_time = start_time
        election.end_time = end_time
        election.candidate_ids = list(candidate_ids)
        election.reset_results()
        return Notification(
            kind=NotificationKind.ELECTION_UPDATED,
            subject=election_id,
            value=election.title,
            scope=election_id,
            caller=caller,
        )

    def set_active(self, caller: Identity, election_id: str, active: bool) -> Notification:
        election = self.require(election_id)
        if not self.can_manage(election, caller):
            raise UnauthorizedError("change election activity", caller)

        previous = election.is_active
        election.is_active = active
        return Notification(
            kind=NotificationKind.ELECTION_ACTIVATION_CHANGED,
            subject=election_id,
            value=active,
            previous=previous,
            scope=election_id,
            caller=caller,
        )

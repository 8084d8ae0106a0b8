"""Access Control — owner/admin role registry gating privileged operations.

Invariants:
    - Exactly one owner, never the null identity; the null identity is never an admin
    - Owner is implicitly admin-equivalent (is_admin(owner) is True)
    - Ownership transfer and admin-set mutation require strict owner identity
    - check_* functions are PURE: return an UnauthorizedError on violation, None on success
"""

from dataclasses import dataclass, field

from ballotkeeper.core.domain_types import Identity, is_null_identity
from ballotkeeper.core.errors import InvalidArgumentError, UnauthorizedError
from ballotkeeper.core.notifications import Notification, NotificationKind


@dataclass
class AccessControl:
    """Role set: one transferable owner plus an owner-managed admin set."""

    owner: Identity
    admins: set[Identity] = field(default_factory=set)

    def __post_init__(self):
        if is_null_identity(self.owner):
            raise InvalidArgumentError("Owner cannot be the null identity", "owner")

    def is_owner(self, identity: str) -> bool:
        return not is_null_identity(identity) and identity == self.owner

    def is_admin(self, identity: str) -> bool:
        """Admin-or-owner predicate; the standard privilege tier."""
        return self.is_owner(identity) or identity in self.admins

    # --- Owner-only mutations ------------------------------------------------

    def transfer_ownership(self, caller: Identity, new_owner: Identity) -> Notification:
        error = check_owner(self, caller, "transfer ownership")
        if error:
            raise error
        if is_null_identity(new_owner):
            raise InvalidArgumentError("New owner cannot be the null identity", "new_owner")

        previous = self.owner
        self.owner = new_owner
        return Notification(
            kind=NotificationKind.OWNERSHIP_TRANSFERRED,
            subject=new_owner,
            value=new_owner,
            previous=previous,
            caller=caller,
        )

    def set_admin(self, caller: Identity, identity: Identity, is_admin: bool) -> Notification:
        """Idempotent: emits even when membership is unchanged."""
        error = check_owner(self, caller, "manage admins")
        if error:
            raise error
        if is_null_identity(identity):
            raise InvalidArgumentError("Admin cannot be the null identity", "identity")

        previous = identity in self.admins
        if is_admin:
            self.admins.add(identity)
        else:
            self.admins.discard(identity)
        return Notification(
            kind=NotificationKind.ADMIN_CHANGED,
            subject=identity,
            value=is_admin,
            previous=previous,
            caller=caller,
        )


# --- Capability checks --------------------------------------------------------

def check_owner(access: AccessControl, caller: str, action: str) -> UnauthorizedError | None:
    if not access.is_owner(caller):
        return UnauthorizedError(action, caller)
    return None


def check_admin(access: AccessControl, caller: str, action: str) -> UnauthorizedError | None:
    if not access.is_admin(caller):
        return UnauthorizedError(action, caller)
    return None

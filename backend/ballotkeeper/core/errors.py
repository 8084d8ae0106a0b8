"""Error Hierarchy — typed, categorized exceptions for every BallotKeeper failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors are raised before any state is touched: a failed operation
      leaves zero observable side effects
    - to_response() produces the uniform error envelope for whatever wraps the core

Design Decisions:
    - Single hierarchy with BallotKeeperError base: callers catch one type and switch on code
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    AUTHORIZATION = "authorization"
    LIFECYCLE = "lifecycle"
    LATCH = "latch"
    ELIGIBILITY = "eligibility"
    VALIDATION = "validation"
    ORDERING = "ordering"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    caller: str | None = None
    scope: str | None = None
    debug_info: dict[str, Any] | None = None


class BallotKeeperError(Exception):
    """Base exception for all BallotKeeper errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        """Convert to standardized error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "caller": self.context.caller,
                    "scope": self.context.scope,
                },
            }
        }


# ─── Authorization ──────────────────────────────────────────────

class UnauthorizedError(BallotKeeperError):
    """Caller lacks the role required by the operation."""
    def __init__(self, action: str, caller: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.caller = caller
        super().__init__(
            f"Caller '{caller}' is not authorized to {action}",
            "UNAUTHORIZED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.ERROR, ctx,
        )
        self.action = action


# ─── Lifecycle gates ────────────────────────────────────────────

class InvalidPhaseError(BallotKeeperError):
    """Global workflow cursor is not in the required phase."""
    def __init__(self, current: str, required: str, context: ErrorContext | None = None):
        super().__init__(
            f"Operation requires phase '{required}', current phase is '{current}'",
            "INVALID_PHASE", ErrorCategory.LIFECYCLE,
            ErrorSeverity.ERROR, context,
        )
        self.current = current
        self.required = required


class NotVotableError(BallotKeeperError):
    """Election is inactive or outside its voting window."""
    def __init__(self, election_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.scope = election_id
        super().__init__(
            f"Election '{election_id}' is not open for voting",
            "NOT_VOTABLE", ErrorCategory.LIFECYCLE,
            ErrorSeverity.ERROR, ctx,
        )


class AlreadyStartedError(BallotKeeperError):
    """Election can no longer be redefined: its start time has been reached."""
    def __init__(self, election_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.scope = election_id
        super().__init__(
            f"Election '{election_id}' has already started",
            "ALREADY_STARTED", ErrorCategory.LIFECYCLE,
            ErrorSeverity.ERROR, ctx,
        )


# ─── One-way latches ────────────────────────────────────────────

class AlreadyRegisteredError(BallotKeeperError):
    def __init__(self, identity: str, context: ErrorContext | None = None):
        super().__init__(
            f"Identity '{identity}' is already registered",
            "ALREADY_REGISTERED", ErrorCategory.LATCH,
            ErrorSeverity.ERROR, context,
        )


class AlreadyVotedError(BallotKeeperError):
    def __init__(self, identity: str, scope: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.caller = identity
        ctx.scope = scope
        super().__init__(
            f"Identity '{identity}' has already voted in '{scope}'",
            "ALREADY_VOTED", ErrorCategory.LATCH,
            ErrorSeverity.ERROR, ctx,
        )


class AlreadyTalliedError(BallotKeeperError):
    def __init__(self, scope: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.scope = scope
        super().__init__(
            f"Results for '{scope}' have already been tallied",
            "ALREADY_TALLIED", ErrorCategory.LATCH,
            ErrorSeverity.ERROR, ctx,
        )


# ─── Missing or ineligible entities ─────────────────────────────

class NotRegisteredError(BallotKeeperError):
    def __init__(self, identity: str, context: ErrorContext | None = None):
        super().__init__(
            f"Identity '{identity}' is not registered",
            "NOT_REGISTERED", ErrorCategory.ELIGIBILITY,
            ErrorSeverity.ERROR, context,
        )


class NotApprovedError(BallotKeeperError):
    def __init__(self, identity: str, context: ErrorContext | None = None):
        super().__init__(
            f"Identity '{identity}' is not approved to vote",
            "NOT_APPROVED", ErrorCategory.ELIGIBILITY,
            ErrorSeverity.ERROR, context,
        )


class InvalidTargetError(BallotKeeperError):
    """Referenced ballot item, candidate or election is missing or not eligible."""
    def __init__(
        self, target_type: str, target_id: object, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{target_type} '{target_id}' does not exist or is not eligible",
            "INVALID_TARGET", ErrorCategory.ELIGIBILITY,
            ErrorSeverity.ERROR, context,
        )
        self.target_type = target_type
        self.target_id = target_id


# ─── Malformed input ────────────────────────────────────────────

class InvalidArgumentError(BallotKeeperError):
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ARGUMENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.field = field


class InvalidTimeRangeError(BallotKeeperError):
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_TIME_RANGE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )


class DuplicateIdError(BallotKeeperError):
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' already exists",
            "DUPLICATE_ID", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context,
        )
        self.resource_id = resource_id


# ─── Ordering preconditions ─────────────────────────────────────

class TooEarlyError(BallotKeeperError):
    """Tally attempted before the election's end time has passed."""
    def __init__(self, scope: str, end_time: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.scope = scope
        super().__init__(
            f"Election '{scope}' cannot be tallied before it ends at {end_time}",
            "TOO_EARLY", ErrorCategory.ORDERING,
            ErrorSeverity.ERROR, ctx,
        )


class NotTalliedYetError(BallotKeeperError):
    def __init__(self, scope: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.scope = scope
        super().__init__(
            f"Results for '{scope}' have not been tallied yet",
            "NOT_TALLIED_YET", ErrorCategory.ORDERING,
            ErrorSeverity.ERROR, ctx,
        )


# ─── Infrastructure Errors ──────────────────────────────────────

class DatabaseError(BallotKeeperError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation

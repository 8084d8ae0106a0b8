"""ORM Models — SQLAlchemy declarative models for the audit trail and engine snapshots.

Invariants:
    - All models inherit from Base (db/base.py)
    - Rows are scoped by engine_name so several engines can share one database

Design Decisions:
    - One file per entity
    - All models imported here so Base.metadata knows every table before create_all
"""

from ballotkeeper.models.audit_event import AuditEvent  # noqa: F401
from ballotkeeper.models.ledger_snapshot import LedgerSnapshot  # noqa: F401

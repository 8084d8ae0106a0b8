"""Core Layer — election state machines and data invariants, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/ or db/
    - Every mutating operation validates all preconditions before touching state
    - Every successful mutation returns exactly one Notification

Design Decisions:
    - Functional core separated from imperative shell: services/ serializes writers,
      dispatches notifications and persists snapshots around these operations
"""

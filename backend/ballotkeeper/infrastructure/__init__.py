"""Infrastructure Layer — database sessions, logging, and the system clock.

Invariants:
    - Infrastructure never imports from core/ domain logic, except the error hierarchy
    - Database failures are mapped to DatabaseError with automatic rollback
"""

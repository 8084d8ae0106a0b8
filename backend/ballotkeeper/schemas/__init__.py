"""Pydantic Schemas — read models returned by the service layer.

Invariants:
    - Views are copies: mutating a view never touches engine state
    - Domain types from core/ used for enum fields
"""

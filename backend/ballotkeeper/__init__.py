"""BallotKeeper — authoritative election record-keeper.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""

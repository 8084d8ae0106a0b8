"""Services Layer — serialized writers around the pure core, plus shell adapters.

Invariants:
    - Every mutation runs under the owning service's asyncio.Lock (single writer)
    - Notifications are dispatched only after the core operation succeeded
    - SQL adapters implement the Protocols in core/repository_protocols.py
"""

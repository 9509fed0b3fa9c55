"""EventStore protocol - the read capability admission needs from storage.

Implementations: SQLiteEventStore (relay's sqlite eventstore), test fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EventStore(Protocol):
    """Read-only view of the relay's persisted events."""

    async def count_events(self, kind: int, author: str, event_id: str) -> int:
        """Count stored events with this kind, author pubkey and id.

        Raises EventStoreError if the query itself fails.
        """
        ...

    async def count_by_id(self, kind: int, event_id: str) -> int:
        """Count stored events with this kind and id, any author."""
        ...


__all__ = ["EventStore"]

"""RelayClient protocol - outbound connection to another relay.

Implementations: WebSocketRelayClient (aiohttp), test fakes.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

from comicrelay.relay.models import Event, Filter


@runtime_checkable
class RelayClient(Protocol):
    """One connection to one relay, scoped to a single lookup."""

    url: str

    async def connect(self) -> None:
        """Open the connection. Raises RelayConnectionError."""
        ...

    async def query_sync(self, flt: Filter) -> list[Event]:
        """Run one subscription until end-of-stored-events. Raises RelayQueryError."""
        ...

    async def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        ...


RelayClientFactory = Callable[[str], RelayClient]


__all__ = ["RelayClient", "RelayClientFactory"]

"""Remote lookup of channel creation events.

Two modes:
- hinted: ask the single relay named in the update's reference tag, and
  require exactly one matching event
- pool: race the configured fallback relays, first matching event wins

Every connection lives only for the duration of one lookup and is closed
on every exit path.
"""

from __future__ import annotations

import asyncio
import time
from typing import Sequence

import bittensor as bt

from comicrelay.relay.models import Event, LookupSource, creation_filter
from comicrelay.relay.network.interface import RelayClient, RelayClientFactory
from comicrelay.relay.errors import CreationLookupError, CreationNotFound, LookupTimeout
from comicrelay.relay.network.websocket import WebSocketRelayClient


DEFAULT_FALLBACK_RELAYS: tuple[str, ...] = (
    "wss://purplepag.es",
    "wss://relay.nos.social",
    "wss://user.kindpag.es",
    "wss://relay.nostr.band",
    "wss://relay.damus.io",
    "wss://relay.snort.net",
)


class RemoteLookup:
    """Fetches a creation event from other relays."""

    def __init__(
        self,
        fallback_relays: Sequence[str] = DEFAULT_FALLBACK_RELAYS,
        timeout: float = 5.0,
        client_factory: RelayClientFactory | None = None,
    ):
        self.fallback_relays = list(fallback_relays)
        self.timeout = timeout
        self._client_factory = client_factory or (
            lambda url: WebSocketRelayClient(url, connect_timeout=timeout)
        )

    async def get_create_event(
        self, author: str, event_id: str, relay_hint: str = "",
    ) -> tuple[Event, LookupSource]:
        """Return the matching creation event and the mode that found it.

        Raises a CreationLookupError subclass on any failure.
        """
        started = time.monotonic()
        mode = "hint" if relay_hint else "pool"
        try:
            if relay_hint:
                event = await self._query_hinted(relay_hint, author, event_id)
                source = LookupSource.REMOTE_HINT
            else:
                event = await self._query_pool(author, event_id)
                source = LookupSource.REMOTE_POOL
        except CreationLookupError as e:
            bt.logging.info({"remote_lookup": {
                "mode": mode,
                "event_id": event_id,
                "status": "failed",
                "error": str(e),
                "elapsed": round(time.monotonic() - started, 3),
            }})
            raise

        bt.logging.debug({"remote_lookup": {
            "mode": mode,
            "event_id": event_id,
            "status": "found",
            "elapsed": round(time.monotonic() - started, 3),
        }})
        return event, source

    # -- Hinted mode --

    async def _query_hinted(self, url: str, author: str, event_id: str) -> Event:
        try:
            events = await asyncio.wait_for(
                self._fetch(url, author, event_id), timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise LookupTimeout(f"lookup on {url} timed out after {self.timeout}s") from e

        # exactly one: zero and several are both ambiguous
        if len(events) != 1:
            raise CreationNotFound()
        return events[0]

    async def _fetch(self, url: str, author: str, event_id: str) -> list[Event]:
        client: RelayClient = self._client_factory(url)
        try:
            await client.connect()
            return await client.query_sync(creation_filter(author, event_id))
        finally:
            await client.close()

    # -- Pool mode --

    async def _query_pool(self, author: str, event_id: str) -> Event:
        if not self.fallback_relays:
            raise CreationNotFound()

        tasks = {
            asyncio.ensure_future(self._fetch(url, author, event_id)): url
            for url in self.fallback_relays
        }
        deadline = time.monotonic() + self.timeout
        pending = set(tasks)
        try:
            while pending:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                done, pending = await asyncio.wait(
                    pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED,
                )
                for task in done:
                    if task.cancelled():
                        continue
                    exc = task.exception()
                    if exc is not None:
                        bt.logging.debug({"remote_lookup": {"relay": tasks[task], "error": str(exc)}})
                        continue
                    events = task.result()
                    if events:
                        return events[0]
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        raise CreationNotFound()


__all__ = ["DEFAULT_FALLBACK_RELAYS", "RemoteLookup"]

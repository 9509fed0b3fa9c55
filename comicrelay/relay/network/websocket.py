"""aiohttp websocket client for querying another relay.

Speaks just enough NIP-01 for a one-shot lookup:
  -> ["REQ", <sub_id>, <filter>]
  <- ["EVENT", <sub_id>, <event>] ... ["EOSE", <sub_id>]
  -> ["CLOSE", <sub_id>]
"""

from __future__ import annotations

import asyncio
import json
import secrets

import aiohttp
import bittensor as bt
from pydantic import ValidationError

from comicrelay.relay.models import Event, Filter
from comicrelay.relay.errors import RelayConnectionError, RelayQueryError


class WebSocketRelayClient:
    """Single-connection relay client. Not reusable after close()."""

    def __init__(self, url: str, connect_timeout: float = 5.0):
        self.url = url
        self.connect_timeout = connect_timeout
        self._session: aiohttp.ClientSession | None = None
        self._ws: aiohttp.ClientWebSocketResponse | None = None

    async def connect(self) -> None:
        self._session = aiohttp.ClientSession()
        try:
            self._ws = await asyncio.wait_for(
                self._session.ws_connect(self.url),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError as e:
            await self.close()
            raise RelayConnectionError(f"connect to {self.url} timed out") from e
        except (aiohttp.ClientError, OSError, ValueError) as e:
            await self.close()
            raise RelayConnectionError(f"failed to connect to {self.url}: {e}") from e

    async def query_sync(self, flt: Filter) -> list[Event]:
        if self._ws is None:
            raise RelayQueryError(f"not connected to {self.url}")

        sub_id = secrets.token_hex(8)
        events: list[Event] = []
        try:
            await self._ws.send_json(["REQ", sub_id, flt.to_wire()])
            async for msg in self._ws:
                if msg.type != aiohttp.WSMsgType.TEXT:
                    if msg.type == aiohttp.WSMsgType.ERROR:
                        raise RelayQueryError(f"{self.url}: {self._ws.exception()}")
                    continue

                frame = _decode_frame(msg.data)
                if frame is None or len(frame) < 2 or frame[1] != sub_id:
                    if frame and frame[0] == "NOTICE":
                        bt.logging.debug({"relay_client": {"url": self.url, "notice": frame[1:]}})
                    continue

                label = frame[0]
                if label == "EVENT" and len(frame) >= 3:
                    event = _decode_event(frame[2])
                    if event is not None and flt.matches(event):
                        events.append(event)
                elif label == "EOSE":
                    await self._ws.send_json(["CLOSE", sub_id])
                    return events
                elif label == "CLOSED":
                    reason = frame[2] if len(frame) > 2 else ""
                    raise RelayQueryError(f"{self.url} closed subscription: {reason}")
        except (aiohttp.ClientError, ConnectionError) as e:
            raise RelayQueryError(f"{self.url}: {e}") from e

        raise RelayQueryError(f"{self.url} closed connection before end of stored events")

    async def close(self) -> None:
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._session is not None and not self._session.closed:
            await self._session.close()


def _decode_frame(data: str) -> list | None:
    try:
        frame = json.loads(data)
    except json.JSONDecodeError:
        return None
    if not isinstance(frame, list) or not frame:
        return None
    return frame


def _decode_event(raw: object) -> Event | None:
    try:
        return Event.model_validate(raw)
    except ValidationError as e:
        bt.logging.debug({"relay_client": {"malformed_event": str(e)}})
        return None


__all__ = ["WebSocketRelayClient"]

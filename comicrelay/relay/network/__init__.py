from .interface import RelayClient, RelayClientFactory
from .websocket import WebSocketRelayClient

__all__ = ["RelayClient", "RelayClientFactory", "WebSocketRelayClient"]

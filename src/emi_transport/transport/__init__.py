"""Transport layer.

Two independent channels to the gateway:
- Event stream - one persistent WebSocket, frames decoded into RawEvents
- Commands - HTTP POST request/response with retry and backoff

Event sources are interchangeable behind the EventSource protocol, so the
bot works the same over a bare WebSocket, a reconnecting supervisor or a
test double.
"""

from .base import ConnectionState, EventChannel, EventSource
from .http import HttpClient, compute_backoff
from .reconnect import ReconnectingEventSource
from .websocket import WebSocketEventSource, decode_frame

__all__ = [
    # Base abstractions
    "ConnectionState",
    "EventChannel",
    "EventSource",
    # Event stream
    "WebSocketEventSource",
    "ReconnectingEventSource",
    "decode_frame",
    # Commands
    "HttpClient",
    "compute_backoff",
]

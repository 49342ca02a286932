"""Wire protocol of the gateway.

Two independent channels:
- Events: pushed by the gateway over a persistent WebSocket, one RawEvent
  envelope per frame, decoded into typed BaseEvent models on dispatch
- Commands: POST request/response calls whose results arrive wrapped in an
  HttpResult envelope
"""

from .commands import Endpoint, HttpResult, ImplInfo, LoginInfo, dump_request
from .events import (
    DEFAULT_EVENTS,
    BaseEvent,
    EventType,
    MessageReceiveEvent,
    RawEvent,
    default_event_registry,
)

__all__ = [
    "BaseEvent",
    "DEFAULT_EVENTS",
    "Endpoint",
    "EventType",
    "HttpResult",
    "ImplInfo",
    "LoginInfo",
    "MessageReceiveEvent",
    "RawEvent",
    "default_event_registry",
    "dump_request",
]

"""emi-transport - event and command transport for chat-bot gateways.

Connects a local process to a remote gateway:
- events arrive over a persistent WebSocket and are dispatched to handlers
- commands go out as HTTP request/response calls with retry and backoff

Usage:
    bot = create_bot(TransportConfig(ws_gateway=..., rest_gateway=...))

    @bot.on("message_receive")
    async def on_message(bot, event, raw):
        print(event.plain_text())

    async with bot:
        await bot.wait()
"""

from .api import FileAPI, FriendAPI, GatewayAPI, GroupAPI, MessageAPI, SystemAPI
from .bot import Bot, EventHandler, FunctionHandler, create_bot
from .config import TransportConfig
from .errors import (
    AlreadyConnectedError,
    CommandError,
    EventRegistryExistsError,
    HTTPStatusError,
    MaxRetriesExceededError,
    TransportError,
)
from .protocol import BaseEvent, Endpoint, EventType, HttpResult, RawEvent
from .transport import (
    ConnectionState,
    EventChannel,
    EventSource,
    HttpClient,
    ReconnectingEventSource,
    WebSocketEventSource,
)

__version__ = "0.1.0"

__all__ = [
    # Bot
    "Bot",
    "EventHandler",
    "FunctionHandler",
    "create_bot",
    "TransportConfig",
    # API groups
    "GatewayAPI",
    "SystemAPI",
    "MessageAPI",
    "FriendAPI",
    "GroupAPI",
    "FileAPI",
    # Protocol
    "BaseEvent",
    "Endpoint",
    "EventType",
    "HttpResult",
    "RawEvent",
    # Transport
    "ConnectionState",
    "EventChannel",
    "EventSource",
    "HttpClient",
    "ReconnectingEventSource",
    "WebSocketEventSource",
    # Errors
    "TransportError",
    "AlreadyConnectedError",
    "EventRegistryExistsError",
    "CommandError",
    "HTTPStatusError",
    "MaxRetriesExceededError",
]

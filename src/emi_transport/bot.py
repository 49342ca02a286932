"""Bot - binds a gateway event stream to application handlers.

The bot owns two per-instance registries:
- event registry: event type identifier -> BaseEvent model to decode into
- handler registry: event type identifier -> handlers, in registration order

Both are meant to be filled before ``open()``. Mutating them while the
dispatch task is running is not synchronized.

Dispatch is strictly sequential: one RawEvent at a time, every handler for
its type awaited in registration order before the next event is taken.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from .api import FileAPI, FriendAPI, GatewayAPI, GroupAPI, MessageAPI, SystemAPI
from .config import TransportConfig
from .errors import EventRegistryExistsError
from .log import trace
from .protocol.events import BaseEvent, RawEvent, default_event_registry
from .transport.base import EventChannel, EventSource
from .transport.http import HttpClient
from .transport.reconnect import ReconnectingEventSource
from .transport.websocket import WebSocketEventSource

logger = logging.getLogger(__name__)

HandlerFunc = Callable[["Bot", Any, RawEvent], Awaitable[None] | None]


def _key(event_type: str | Enum) -> str:
    return event_type.value if isinstance(event_type, Enum) else event_type


class EventHandler(ABC):
    """Base class for event handlers.

    A handler is bound to exactly one event type. Registering the same
    handler twice makes it run twice per event.
    """

    event_type: str = ""

    @abstractmethod
    async def handle(self, bot: Bot, event: BaseEvent, raw: RawEvent) -> None:
        """Handle one decoded event.

        Args:
            bot: The bot that received the event, for issuing commands
            event: The payload decoded into the registered model
            raw: The original envelope (self_id, time, untyped data)
        """


class FunctionHandler(EventHandler):
    """Adapts a plain function (sync or async) into an EventHandler."""

    def __init__(self, event_type: str | Enum, func: HandlerFunc):
        self.event_type = _key(event_type)
        self.func = func

    async def handle(self, bot: Bot, event: BaseEvent, raw: RawEvent) -> None:
        result = self.func(bot, event, raw)
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"FunctionHandler({self.event_type!r}, {name})"


class Bot:
    """Event dispatcher plus command access for one gateway account.

    Usage:
        bot = Bot(http_client, WebSocketEventSource(ws_url, token))
        bot.use_default_events()

        @bot.on(EventType.MESSAGE_RECEIVE)
        async def echo(bot, event, raw):
            await bot.message.send_private_message(...)

        await bot.open()
        await bot.wait()
    """

    def __init__(self, http_client: HttpClient, event_source: EventSource):
        self.http_client = http_client
        self.event_source = event_source
        self._api = GatewayAPI(http_client)

        self._event_registry: dict[str, type[BaseEvent]] = {}
        self._handlers: dict[str, list[EventHandler]] = {}

        self._dispatch_task: asyncio.Task[None] | None = None
        self._done: asyncio.Event | None = None

    # =========================================================================
    # Registries
    # =========================================================================

    @property
    def event_registry(self) -> Mapping[str, type[BaseEvent]]:
        """Read-only view of the event registry."""
        return MappingProxyType(self._event_registry)

    @property
    def handlers(self) -> Mapping[str, list[EventHandler]]:
        """Read-only view of the handler registry."""
        return MappingProxyType(self._handlers)

    def register_event_type(
        self,
        event_type: str | Enum,
        model: type[BaseEvent],
        *,
        replace: bool = False,
    ) -> None:
        """Map an event type identifier to the model its payload decodes into.

        Raises:
            EventRegistryExistsError: If the identifier is already registered
                and ``replace`` is False
        """
        key = _key(event_type)
        if key in self._event_registry and not replace:
            raise EventRegistryExistsError(key)
        self._event_registry[key] = model

    def use_default_events(self) -> None:
        """Register every standard gateway event that isn't registered yet.

        Identifiers the application registered earlier keep their model.
        """
        for key, model in default_event_registry().items():
            self._event_registry.setdefault(key, model)

    def add_handler(self, handler: EventHandler) -> None:
        """Append ``handler`` to the handlers for its event type."""
        self._handlers.setdefault(_key(handler.event_type), []).append(handler)

    def on(self, event_type: str | Enum) -> Callable[[HandlerFunc], HandlerFunc]:
        """Decorator registering a function as a handler for ``event_type``."""

        def decorator(func: HandlerFunc) -> HandlerFunc:
            self.add_handler(FunctionHandler(event_type, func))
            return func

        return decorator

    # =========================================================================
    # Commands
    # =========================================================================

    @property
    def api(self) -> GatewayAPI:
        return self._api

    @property
    def system(self) -> SystemAPI:
        return self._api.system

    @property
    def message(self) -> MessageAPI:
        return self._api.message

    @property
    def friend(self) -> FriendAPI:
        return self._api.friend

    @property
    def group(self) -> GroupAPI:
        return self._api.group

    @property
    def file(self) -> FileAPI:
        return self._api.file

    async def call(
        self,
        endpoint: str,
        request: Any = None,
        *,
        response_model: type[Any] | None = None,
    ) -> Any:
        """Issue any command by endpoint name."""
        if response_model is None:
            return await self.http_client.post(endpoint, request)
        return await self.http_client.post(endpoint, request, response_model=response_model)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self._dispatch_task is not None and not self._dispatch_task.done()

    async def open(self) -> None:
        """Open the event source and start dispatching.

        Raises:
            AlreadyConnectedError: If the event source is already open
        """
        channel = await self.event_source.open()
        self._done = asyncio.Event()
        self._dispatch_task = asyncio.create_task(self._dispatch_loop(channel, self._done))

    async def close(self) -> None:
        """Close the event source; dispatch stops once the channel drains."""
        await self.event_source.close()

    async def wait(self) -> None:
        """Wait for the dispatch loop to finish.

        Returns immediately if the bot was never opened.
        """
        if self._done is None:
            return
        await self._done.wait()

    async def __aenter__(self) -> Bot:
        await self.open()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
        await self.wait()
        await self.http_client.close()

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def dispatch(self, raw: RawEvent) -> int:
        """Decode one RawEvent and run its handlers.

        Unknown types, types nobody listens to and undecodable payloads are
        logged and skipped. A handler that raises is logged and the remaining
        handlers still run.

        Returns:
            Number of handlers invoked
        """
        model = self._event_registry.get(raw.type)
        if model is None:
            logger.warning(f"Unknown event type: {raw.type}")
            return 0

        handlers = self._handlers.get(raw.type)
        if not handlers:
            trace(logger, "No handler registered for event: %s", raw.type)
            return 0

        try:
            event = model.decode(raw.data)
        except ValidationError as e:
            logger.error(f"Failed to decode event data for {raw.type}: {e}")
            return 0

        for handler in list(handlers):
            try:
                await handler.handle(self, event, raw)
            except Exception:
                logger.exception(f"Error in handler {handler!r} for {raw.type}")
        return len(handlers)

    async def _dispatch_loop(self, channel: EventChannel, done: asyncio.Event) -> None:
        """Background task consuming the channel until it closes."""
        try:
            async for raw in channel:
                await self.dispatch(raw)
        finally:
            done.set()
            logger.debug("Dispatch loop finished")


# Factory functions


def create_bot(config: TransportConfig | None = None) -> Bot:
    """Build a Bot wired from ``config`` with the standard events registered.

    Args:
        config: Gateway addresses, credentials and retry settings
            (default: read from ``EMI_*`` environment variables)

    Returns:
        Bot with an HttpClient and a WebSocket event source, wrapped in a
        ReconnectingEventSource when ``config.auto_reconnect`` is set
    """
    config = config or TransportConfig.from_env()

    http_client = HttpClient(
        config.rest_gateway,
        config.access_token,
        timeout=config.timeout,
        max_retries=config.max_retries,
        base_retry_delay=config.base_retry_delay,
        max_retry_delay=config.max_retry_delay,
        max_retry_jitter=config.max_retry_jitter,
    )

    event_source: EventSource = WebSocketEventSource(config.ws_gateway, config.access_token)
    if config.auto_reconnect:
        event_source = ReconnectingEventSource(
            event_source,
            reconnect_delay=config.reconnect_delay,
            max_reconnect_delay=config.max_reconnect_delay,
            reconnect_backoff=config.reconnect_backoff,
            max_attempts=config.max_reconnect_attempts,
        )

    bot = Bot(http_client, event_source)
    bot.use_default_events()
    return bot

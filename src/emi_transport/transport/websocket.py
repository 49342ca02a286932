"""WebSocket event source.

Holds one persistent WebSocket connection to the gateway's event endpoint
and feeds every inbound frame, decoded into a RawEvent, into an
EventChannel.

Wire format:
- Text frames: the event envelope as JSON
- Binary frames: the same JSON, zlib-compressed
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import zlib
from collections.abc import Awaitable, Callable
from typing import Any

import websockets

from ..errors import AlreadyConnectedError
from ..protocol.events import RawEvent
from .base import ConnectionState, EventChannel

logger = logging.getLogger(__name__)

ConnectFunc = Callable[..., Awaitable[Any]]


def decode_frame(message: str | bytes) -> RawEvent:
    """Decode one WebSocket frame into a RawEvent.

    ``bytes`` means a binary frame and is decompressed first.

    Raises:
        zlib.error: If a binary frame is not valid zlib data
        ValueError: If the payload is not a valid event envelope
    """
    if isinstance(message, bytes):
        message = zlib.decompress(message)
    return RawEvent.model_validate_json(message)


class WebSocketEventSource:
    """Event source over a single WebSocket connection.

    Lifecycle: CLOSED --open()--> OPEN --close() or read error--> CLOSED.
    A closed source can be opened again; each open gets a fresh channel and
    completion signal. There is no automatic reconnection here, see
    ReconnectingEventSource for that.
    """

    def __init__(
        self,
        ws_gateway: str,
        access_token: str = "",
        *,
        open_timeout: float | None = 10.0,
        connect: ConnectFunc | None = None,
    ):
        self.ws_gateway = ws_gateway
        self.access_token = access_token
        self.open_timeout = open_timeout
        self._connect: ConnectFunc = connect or websockets.connect

        self._lock = asyncio.Lock()
        self._ws: Any = None  # websockets ClientConnection
        self._channel: EventChannel | None = None
        self._done: asyncio.Event | None = None
        self._receive_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return ConnectionState.OPEN if self._ws is not None else ConnectionState.CLOSED

    @property
    def is_open(self) -> bool:
        return self._ws is not None

    async def open(self) -> EventChannel:
        """Connect to the gateway and start receiving.

        Raises:
            AlreadyConnectedError: If this source already has a live connection
            ConnectionError: If the WebSocket handshake fails
        """
        async with self._lock:
            if self._ws is not None:
                raise AlreadyConnectedError()

            headers: dict[str, str] = {}
            if self.access_token:
                headers["Authorization"] = f"Bearer {self.access_token}"

            try:
                ws = await self._connect(
                    self.ws_gateway,
                    additional_headers=headers,
                    open_timeout=self.open_timeout,
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to {self.ws_gateway}: {e}") from e

            self._ws = ws
            self._channel = EventChannel()
            self._done = asyncio.Event()
            self._receive_task = asyncio.create_task(self._receive(ws, self._channel))

            logger.info(f"WebSocket connected to {self.ws_gateway}")
            return self._channel

    async def close(self) -> None:
        """Close the connection, then the channel and completion signal.

        Safe to call repeatedly and concurrently with the receive task's own
        error-triggered close; only the first call does anything.
        """
        async with self._lock:
            ws = self._ws
            if ws is None:
                return

            self._ws = None
            task = self._receive_task
            self._receive_task = None
            channel = self._channel
            done = self._done

        try:
            await ws.close()
        finally:
            if channel is not None:
                channel.close()
            if done is not None:
                done.set()

            if task is not None and task is not asyncio.current_task():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

            logger.info(f"WebSocket disconnected from {self.ws_gateway}")

    async def wait(self) -> None:
        """Wait until the current connection has ended.

        Returns immediately if the source was never opened.
        """
        if self._done is None:
            return
        await self._done.wait()

    async def _receive(self, ws: Any, channel: EventChannel) -> None:
        """Background task reading frames from ``ws`` into ``channel``."""
        while True:
            try:
                message = await ws.recv()
            except Exception as e:
                async with self._lock:
                    current = self._ws

                # Superseded or closed by someone else; nothing to report
                if ws is not current:
                    return

                logger.error(f"Error when reading message: {e}")
                try:
                    await self.close()
                except Exception:
                    logger.exception("Failed to close websocket connection")
                return

            try:
                raw = decode_frame(message)
            except (zlib.error, ValueError) as e:
                logger.error(f"Failed to decode message: {e}")
                continue

            logger.debug(
                "Received event: {event_type: %s, self_id: %d, time: %d}",
                raw.type,
                raw.self_id,
                raw.time,
            )

            if not await channel.send(raw):
                return

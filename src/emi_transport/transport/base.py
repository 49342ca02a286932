"""Event source abstraction.

An event source owns one persistent connection to the gateway and turns
inbound frames into RawEvents. Opening it hands back an EventChannel; the
channel closes when the connection ends, which is how consumers learn that
the stream is over.

Architecture:
- EventSource is the PROTOCOL every source implements (WebSocket, the
  reconnecting supervisor, test doubles)
- EventChannel is the hand-off between the receive task and the consumer
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from enum import Enum
from typing import Protocol, runtime_checkable

from ..protocol.events import RawEvent


class ConnectionState(str, Enum):
    """Connection state machine."""

    CLOSED = "closed"
    OPEN = "open"


class EventChannel:
    """Bounded single-consumer channel of RawEvents with an explicit close.

    Holds at most ``maxsize`` events (one by default), so a slow consumer
    blocks the producer instead of letting events pile up in memory.

    Closing is idempotent. After close, iteration drains whatever is still
    queued and then stops, and producers blocked in ``send`` give up.
    """

    def __init__(self, maxsize: int = 1):
        self._queue: asyncio.Queue[RawEvent] = asyncio.Queue(maxsize=maxsize)
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def send(self, event: RawEvent) -> bool:
        """Queue an event, waiting for room.

        Returns False if the channel was closed before the event got in.
        """
        if self.closed:
            return False
        if not self._queue.full():
            self._queue.put_nowait(event)
            return True

        put = asyncio.ensure_future(self._queue.put(event))
        closed = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({put, closed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closed.cancel()
            if not put.done():
                put.cancel()
        return put.done() and not put.cancelled()

    async def receive(self) -> RawEvent | None:
        """Return the next event, or None once the channel is closed and drained."""
        if not self._queue.empty():
            return self._queue.get_nowait()
        if self.closed:
            return None

        get = asyncio.ensure_future(self._queue.get())
        closed = asyncio.ensure_future(self._closed.wait())
        try:
            await asyncio.wait({get, closed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closed.cancel()
            if not get.done():
                get.cancel()
        if get.done() and not get.cancelled():
            return get.result()
        return None

    def __aiter__(self) -> AsyncIterator[RawEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[RawEvent]:
        while True:
            event = await self.receive()
            if event is None:
                return
            yield event


@runtime_checkable
class EventSource(Protocol):
    """Protocol for gateway event sources.

    All sources must implement:
    - open: connect and return the channel events will arrive on
    - close: tear the connection down, closing the channel exactly once
    - wait: block until the current connection has ended
    """

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        ...

    async def open(self) -> EventChannel:
        """Connect to the gateway.

        Raises:
            AlreadyConnectedError: If the source is already open
        """
        ...

    async def close(self) -> None:
        """Close the connection. A no-op when already closed."""
        ...

    async def wait(self) -> None:
        """Wait for the current connection to end.

        Returns immediately if the source was never opened.
        """
        ...

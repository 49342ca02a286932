"""Reconnecting event source.

Supervises another EventSource and re-opens it with exponential backoff
whenever its stream ends without an explicit ``close()``. Events from every
underlying connection are forwarded into one long-lived channel, so the
consumer never sees the reconnects.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..errors import AlreadyConnectedError
from .base import ConnectionState, EventChannel, EventSource

logger = logging.getLogger(__name__)


class ReconnectingEventSource:
    """EventSource wrapper adding automatic reconnection.

    The first ``open()`` is not retried: a bad address or token surfaces to
    the caller immediately. Only connections that were up and then dropped
    are re-established.
    """

    def __init__(
        self,
        inner: EventSource,
        *,
        reconnect_delay: float = 1.0,
        max_reconnect_delay: float = 30.0,
        reconnect_backoff: float = 2.0,
        max_attempts: int = 0,
    ):
        self.inner = inner
        self.reconnect_delay = reconnect_delay
        self.max_reconnect_delay = max_reconnect_delay
        self.reconnect_backoff = reconnect_backoff
        self.max_attempts = max_attempts  # 0 = unlimited

        self._lock = asyncio.Lock()
        self._closing = False
        self._channel: EventChannel | None = None
        self._done: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

        self.reconnects = 0

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        if self._task is not None and not self._task.done():
            return ConnectionState.OPEN
        return ConnectionState.CLOSED

    async def open(self) -> EventChannel:
        """Open the inner source and start supervising it.

        Raises:
            AlreadyConnectedError: If the supervisor is already running
        """
        async with self._lock:
            if self.state == ConnectionState.OPEN:
                raise AlreadyConnectedError()

            inner_channel = await self.inner.open()

            self._closing = False
            self._channel = EventChannel()
            self._done = asyncio.Event()
            self._task = asyncio.create_task(self._run(inner_channel, self._channel, self._done))
            return self._channel

    async def close(self) -> None:
        """Stop supervising and close the inner source."""
        async with self._lock:
            task = self._task
            if task is None:
                return
            self._closing = True
            self._task = None

        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        await self.inner.close()

    async def wait(self) -> None:
        """Wait until supervision has ended."""
        if self._done is None:
            return
        await self._done.wait()

    def next_delay(self, attempt: int) -> float:
        """Delay before reconnect attempt ``attempt`` (0-based)."""
        return min(
            self.max_reconnect_delay,
            self.reconnect_delay * (self.reconnect_backoff**attempt),
        )

    async def _run(
        self,
        inner_channel: EventChannel,
        channel: EventChannel,
        done: asyncio.Event,
    ) -> None:
        """Forward events, reconnecting whenever the inner stream ends."""
        try:
            current: EventChannel | None = inner_channel
            while current is not None:
                async for raw in current:
                    if not await channel.send(raw):
                        return

                if self._closing:
                    return

                logger.warning("Event stream ended unexpectedly, reconnecting")
                current = await self._reconnect()
        finally:
            channel.close()
            done.set()

    async def _reconnect(self) -> EventChannel | None:
        attempt = 0
        while not self._closing:
            if self.max_attempts and attempt >= self.max_attempts:
                logger.error(f"Giving up after {attempt} reconnect attempts")
                return None

            delay = self.next_delay(attempt)
            logger.info(f"Reconnecting in {delay:.1f}s (attempt {attempt + 1})")
            await asyncio.sleep(delay)
            attempt += 1

            try:
                inner_channel = await self.inner.open()
            except AlreadyConnectedError:
                await self.inner.close()
                continue
            except (ConnectionError, OSError) as e:
                logger.warning(f"Reconnect attempt {attempt} failed: {e}")
                continue

            self.reconnects += 1
            logger.info("Reconnected")
            return inner_channel
        return None

"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
import json
import zlib
from typing import Any

import pytest

from emi_transport.protocol.events import RawEvent


@pytest.fixture(scope="module")
def anyio_backend():
    """Configure anyio to use asyncio backend."""
    return "asyncio"


# =============================================================================
# Frame helpers
# =============================================================================


def envelope(
    event_type: str = "message_receive",
    data: Any = None,
    self_id: int = 10001,
    time: int = 1718000000,
) -> dict[str, Any]:
    """Build an event envelope as the gateway sends it."""
    return {"type": event_type, "self_id": self_id, "time": time, "data": data}


def text_frame(**kwargs: Any) -> str:
    return json.dumps(envelope(**kwargs))


def binary_frame(**kwargs: Any) -> bytes:
    return zlib.compress(json.dumps(envelope(**kwargs)).encode("utf-8"))


def raw_event(**kwargs: Any) -> RawEvent:
    return RawEvent.model_validate(envelope(**kwargs))


# =============================================================================
# Fake WebSocket connection
# =============================================================================


class FakeWebSocket:
    """Stands in for a websockets ClientConnection.

    Frames pushed with ``feed`` are returned by ``recv`` in order. Feeding an
    exception makes ``recv`` raise it, which is how a dropped connection
    looks to the reader.
    """

    def __init__(self) -> None:
        self.inbox: asyncio.Queue[Any] = asyncio.Queue()
        self.close_calls = 0

    def feed(self, *frames: Any) -> None:
        for frame in frames:
            self.inbox.put_nowait(frame)

    async def recv(self) -> Any:
        frame = await self.inbox.get()
        if isinstance(frame, BaseException):
            raise frame
        return frame

    async def close(self) -> None:
        self.close_calls += 1


class FakeConnector:
    """Callable replacing ``websockets.connect``; hands out FakeWebSockets."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.sockets: list[FakeWebSocket] = []

    async def __call__(self, url: str, **kwargs: Any) -> FakeWebSocket:
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        ws = FakeWebSocket()
        self.sockets.append(ws)
        return ws

    @property
    def last(self) -> FakeWebSocket:
        return self.sockets[-1]


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()

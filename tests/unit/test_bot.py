"""Unit tests for Bot registries and event dispatch."""

from __future__ import annotations

import asyncio
import logging
from typing import ClassVar
from unittest.mock import AsyncMock

import httpx
import pytest
from conftest import FakeConnector, raw_event, text_frame

from emi_transport.bot import Bot, EventHandler, FunctionHandler, create_bot
from emi_transport.config import TransportConfig
from emi_transport.errors import AlreadyConnectedError, EventRegistryExistsError
from emi_transport.protocol.commands import LoginInfo
from emi_transport.protocol.events import (
    BaseEvent,
    EventType,
    GroupMuteEvent,
    MessageReceiveEvent,
    RawEvent,
)
from emi_transport.transport.http import HttpClient
from emi_transport.transport.reconnect import ReconnectingEventSource
from emi_transport.transport.websocket import WebSocketEventSource


class TextEvent(BaseEvent):
    event_type: ClassVar[str] = "message_receive"

    text: str = ""


@pytest.fixture
def bot(connector: FakeConnector) -> Bot:
    return Bot(
        HttpClient("http://127.0.0.1:3000/api"),
        WebSocketEventSource("ws://127.0.0.1:3000/event", connect=connector),
    )


# =============================================================================
# Registry Tests
# =============================================================================


class TestEventRegistry:
    """Tests for event type registration."""

    def test_register_event_type(self, bot: Bot) -> None:
        bot.register_event_type("message_receive", TextEvent)
        assert bot.event_registry["message_receive"] is TextEvent

    def test_register_accepts_enum(self, bot: Bot) -> None:
        bot.register_event_type(EventType.GROUP_MUTE, GroupMuteEvent)
        assert bot.event_registry["group_mute"] is GroupMuteEvent

    def test_duplicate_registration_raises(self, bot: Bot) -> None:
        """Registering an identifier twice is rejected and keeps the first model."""
        bot.register_event_type("message_receive", TextEvent)

        with pytest.raises(EventRegistryExistsError) as exc_info:
            bot.register_event_type("message_receive", MessageReceiveEvent)

        assert exc_info.value.event_type == "message_receive"
        assert str(exc_info.value) == "event registry already exists: message_receive"
        assert bot.event_registry["message_receive"] is TextEvent

    def test_replace_registration(self, bot: Bot) -> None:
        bot.register_event_type("message_receive", TextEvent)
        bot.register_event_type("message_receive", MessageReceiveEvent, replace=True)
        assert bot.event_registry["message_receive"] is MessageReceiveEvent

    def test_use_default_events(self, bot: Bot) -> None:
        """Standard events are registered without overriding earlier choices."""
        bot.register_event_type("message_receive", TextEvent)
        bot.use_default_events()

        assert len(bot.event_registry) == len(EventType)
        assert bot.event_registry["message_receive"] is TextEvent
        assert bot.event_registry["group_mute"] is GroupMuteEvent

    def test_registries_are_per_instance(self, connector: FakeConnector) -> None:
        source = WebSocketEventSource("ws://x", connect=connector)
        first = Bot(HttpClient("http://x"), source)
        second = Bot(HttpClient("http://x"), source)

        first.register_event_type("message_receive", TextEvent)

        assert "message_receive" not in second.event_registry

    def test_registry_view_is_read_only(self, bot: Bot) -> None:
        with pytest.raises(TypeError):
            bot.event_registry["x"] = TextEvent  # type: ignore[index]


class TestHandlerRegistry:
    """Tests for handler registration."""

    def test_on_decorator_registers(self, bot: Bot) -> None:
        @bot.on(EventType.MESSAGE_RECEIVE)
        async def handler(bot, event, raw):
            pass

        registered = bot.handlers["message_receive"]
        assert len(registered) == 1
        assert isinstance(registered[0], FunctionHandler)
        assert registered[0].func is handler

    def test_add_handler_subclass(self, bot: Bot) -> None:
        class Mute(EventHandler):
            event_type = "group_mute"

            async def handle(self, bot, event, raw):
                pass

        handler = Mute()
        bot.add_handler(handler)

        assert bot.handlers["group_mute"] == [handler]


# =============================================================================
# Dispatch Tests
# =============================================================================


class TestDispatch:
    """Tests for decoding and handler invocation."""

    @pytest.mark.asyncio
    async def test_handler_receives_typed_event(self, bot: Bot) -> None:
        """A message_receive envelope reaches the handler as the registered model."""
        bot.register_event_type("message_receive", TextEvent)
        seen: list[tuple[BaseEvent, RawEvent]] = []

        @bot.on("message_receive")
        async def handler(bot, event, raw):
            seen.append((event, raw))

        count = await bot.dispatch(raw_event(data={"text": "hi"}))

        assert count == 1
        event, raw = seen[0]
        assert isinstance(event, TextEvent)
        assert event.text == "hi"
        assert raw.self_id == 10001

    @pytest.mark.asyncio
    async def test_handlers_run_in_registration_order(self, bot: Bot) -> None:
        bot.register_event_type("message_receive", TextEvent)
        order: list[str] = []

        bot.on("message_receive")(lambda bot, event, raw: order.append("sync"))

        @bot.on("message_receive")
        async def second(bot, event, raw):
            await asyncio.sleep(0)
            order.append("async")

        bot.on("message_receive")(lambda bot, event, raw: order.append("last"))

        await bot.dispatch(raw_event(data={"text": "hi"}))

        assert order == ["sync", "async", "last"]

    @pytest.mark.asyncio
    async def test_unknown_type_is_skipped(self, bot: Bot, caplog) -> None:
        handler = AsyncMock()
        bot.on("mystery")(handler)

        with caplog.at_level(logging.WARNING):
            count = await bot.dispatch(raw_event(event_type="mystery", data={}))

        assert count == 0
        handler.assert_not_called()
        assert "Unknown event type: mystery" in caplog.text

    @pytest.mark.asyncio
    async def test_no_handlers_is_skipped(self, bot: Bot) -> None:
        bot.use_default_events()
        assert await bot.dispatch(raw_event(event_type="group_mute", data={})) == 0

    @pytest.mark.asyncio
    async def test_undecodable_payload_is_skipped(self, bot: Bot, caplog) -> None:
        """A payload that does not fit the model is logged, handlers are not run."""
        bot.register_event_type("group_mute", GroupMuteEvent)
        handler = AsyncMock()
        bot.on("group_mute")(handler)

        with caplog.at_level(logging.ERROR):
            count = await bot.dispatch(
                raw_event(event_type="group_mute", data={"group_id": "not a number"})
            )

        assert count == 0
        handler.assert_not_called()
        assert "Failed to decode event data for group_mute" in caplog.text

    @pytest.mark.asyncio
    async def test_null_payload_decodes_to_defaults(self, bot: Bot) -> None:
        bot.register_event_type("group_mute", GroupMuteEvent)
        seen: list[BaseEvent] = []
        bot.on("group_mute")(lambda bot, event, raw: seen.append(event))

        await bot.dispatch(raw_event(event_type="group_mute", data=None))

        assert seen == [GroupMuteEvent()]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self, bot: Bot, caplog) -> None:
        bot.register_event_type("message_receive", TextEvent)
        after: list[str] = []

        @bot.on("message_receive")
        async def broken(bot, event, raw):
            raise RuntimeError("handler blew up")

        bot.on("message_receive")(lambda bot, event, raw: after.append(event.text))

        with caplog.at_level(logging.ERROR):
            count = await bot.dispatch(raw_event(data={"text": "hi"}))

        assert count == 2
        assert after == ["hi"]
        assert "handler blew up" in caplog.text

    @pytest.mark.asyncio
    async def test_same_handler_twice_runs_twice(self, bot: Bot) -> None:
        bot.register_event_type("message_receive", TextEvent)
        handler = AsyncMock()
        bot.on("message_receive")(handler)
        bot.on("message_receive")(handler)

        await bot.dispatch(raw_event(data={}))

        assert handler.await_count == 2


# =============================================================================
# Lifecycle Tests
# =============================================================================


class TestBotLifecycle:
    """Tests for running the bot against an event source."""

    @pytest.mark.asyncio
    async def test_events_flow_from_source_to_handler(
        self, bot: Bot, connector: FakeConnector
    ) -> None:
        bot.register_event_type("message_receive", TextEvent)
        received = asyncio.Queue()
        bot.on("message_receive")(lambda bot, event, raw: received.put_nowait(event.text))

        await bot.open()
        assert bot.is_running
        connector.last.feed(text_frame(data={"text": "one"}), text_frame(data={"text": "two"}))

        assert await asyncio.wait_for(received.get(), timeout=1) == "one"
        assert await asyncio.wait_for(received.get(), timeout=1) == "two"

        await bot.close()
        await asyncio.wait_for(bot.wait(), timeout=1)
        assert not bot.is_running

    @pytest.mark.asyncio
    async def test_stream_end_stops_dispatch(self, bot: Bot, connector: FakeConnector) -> None:
        """A dropped connection ends the dispatch loop."""
        await bot.open()
        connector.last.feed(ConnectionResetError("gone"))

        await asyncio.wait_for(bot.wait(), timeout=1)
        assert not bot.is_running

    @pytest.mark.asyncio
    async def test_open_twice_raises(self, bot: Bot) -> None:
        await bot.open()
        with pytest.raises(AlreadyConnectedError):
            await bot.open()
        await bot.close()

    @pytest.mark.asyncio
    async def test_wait_without_open_returns(self, bot: Bot) -> None:
        await asyncio.wait_for(bot.wait(), timeout=1)

    @pytest.mark.asyncio
    async def test_context_manager(self, connector: FakeConnector) -> None:
        http = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(204))
        )
        bot = Bot(
            HttpClient("http://x", http_client=http),
            WebSocketEventSource("ws://x", connect=connector),
        )

        async with bot:
            assert bot.is_running

        assert not bot.is_running
        assert connector.last.close_calls == 1
        await http.aclose()


# =============================================================================
# Command Tests
# =============================================================================


class TestBotCommands:
    """Tests for command access through the bot."""

    @pytest.mark.asyncio
    async def test_system_api(self, connector: FakeConnector) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/get_login_info"
            return httpx.Response(200, json={"retcode": 0, "data": {"uin": 5, "nickname": "n"}})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        bot = Bot(
            HttpClient("http://gw/api", http_client=http),
            WebSocketEventSource("ws://x", connect=connector),
        )

        info = await bot.system.get_login_info()

        assert info == LoginInfo(uin=5, nickname="n")
        await http.aclose()

    @pytest.mark.asyncio
    async def test_call_by_name(self, bot: Bot) -> None:
        bot.http_client.post = AsyncMock(return_value={"ok": True})

        assert await bot.call("custom_endpoint", {"a": 1}) == {"ok": True}
        bot.http_client.post.assert_awaited_once_with("custom_endpoint", {"a": 1})


# =============================================================================
# Factory Tests
# =============================================================================


class TestCreateBot:
    """Tests for the create_bot factory."""

    def test_wires_from_config(self) -> None:
        config = TransportConfig(
            ws_gateway="ws://gw/event",
            rest_gateway="http://gw/api",
            access_token="t",
            max_retries=2,
        )
        bot = create_bot(config)

        assert isinstance(bot.event_source, WebSocketEventSource)
        assert bot.event_source.ws_gateway == "ws://gw/event"
        assert bot.event_source.access_token == "t"
        assert bot.http_client.rest_gateway == "http://gw/api"
        assert bot.http_client.max_retries == 2
        assert len(bot.event_registry) == len(EventType)

    def test_auto_reconnect_wraps_source(self) -> None:
        bot = create_bot(TransportConfig(auto_reconnect=True, reconnect_delay=0.5))

        assert isinstance(bot.event_source, ReconnectingEventSource)
        assert isinstance(bot.event_source.inner, WebSocketEventSource)
        assert bot.event_source.reconnect_delay == 0.5

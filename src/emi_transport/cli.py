"""emi-transport CLI.

Usage:
    emi-transport listen                          # Print every event
    emi-transport listen -e message_receive       # Only some event types
    emi-transport listen --format json            # One JSON object per line
    emi-transport call get_login_info             # Issue one command
    emi-transport call get_group_info -p '{"group_id": 1}'

Gateway addresses and the access token default to the EMI_* environment
variables (EMI_WS_GATEWAY, EMI_REST_GATEWAY, EMI_ACCESS_TOKEN).
"""

from __future__ import annotations

import asyncio
import json
import sys
from datetime import datetime
from typing import Any

import click

from .bot import Bot, create_bot
from .config import TransportConfig
from .errors import CommandError
from .log import configure_logging
from .protocol.events import BaseEvent, RawEvent
from .transport.http import HttpClient

# Output format options
FORMAT_TEXT = "text"
FORMAT_JSON = "json"


def format_timestamp(ts: int) -> str:
    """Format a unix timestamp for display."""
    if ts <= 0:
        return "N/A"
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")


def truncate(text: str | None, max_len: int = 80) -> str:
    """Truncate text for display."""
    if not text:
        return ""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


@click.group()
@click.option(
    "--log-level",
    default="warning",
    type=click.Choice(["trace", "debug", "info", "warning", "error"], case_sensitive=False),
    help="Log level (logs go to stderr)",
)
@click.pass_context
def main(ctx: click.Context, log_level: str) -> None:
    """Event and command transport for chat-bot gateways."""
    configure_logging(log_level)
    ctx.ensure_object(dict)


# =============================================================================
# listen
# =============================================================================


@main.command()
@click.option("--ws", "ws_gateway", help="WebSocket event endpoint (default: $EMI_WS_GATEWAY)")
@click.option("--token", "access_token", help="Access token (default: $EMI_ACCESS_TOKEN)")
@click.option(
    "--event",
    "-e",
    "event_types",
    multiple=True,
    help="Event type to print (repeatable, default: all standard events)",
)
@click.option("--reconnect", is_flag=True, help="Reconnect automatically when the stream drops")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([FORMAT_TEXT, FORMAT_JSON]),
    default=FORMAT_TEXT,
    help="Output format",
)
def listen(
    ws_gateway: str | None,
    access_token: str | None,
    event_types: tuple[str, ...],
    reconnect: bool,
    output_format: str,
) -> None:
    """Connect to the event stream and print events until interrupted.

    Examples:

        emi-transport listen --ws ws://127.0.0.1:3000/event

        emi-transport listen -e message_receive -e group_nudge --format json
    """
    config = TransportConfig.from_env(
        ws_gateway=ws_gateway,
        access_token=access_token,
        auto_reconnect=reconnect or None,
    )
    bot = create_bot(config)

    def print_event(bot: Bot, event: BaseEvent, raw: RawEvent) -> None:
        click.echo(render_event(event, raw, output_format))

    for event_type in event_types or tuple(bot.event_registry):
        if event_type not in bot.event_registry:
            raise click.UsageError(f"Unknown event type: {event_type}")
        bot.on(event_type)(print_event)

    click.echo(f"Listening on {config.ws_gateway}", err=True)
    click.echo("Press Ctrl+C to stop", err=True)

    try:
        asyncio.run(_listen(bot))
    except KeyboardInterrupt:
        click.echo("\nShutting down", err=True)
    except ConnectionError as e:
        click.echo(f"Cannot connect: {e}", err=True)
        sys.exit(1)


async def _listen(bot: Bot) -> None:
    async with bot:
        await bot.wait()


def render_event(event: BaseEvent, raw: RawEvent, output_format: str) -> str:
    """Render one received event for the terminal."""
    if output_format == FORMAT_JSON:
        return json.dumps(
            {
                "type": raw.type,
                "self_id": raw.self_id,
                "time": raw.time,
                "data": event.model_dump(mode="json"),
            },
            ensure_ascii=False,
        )
    payload = json.dumps(event.model_dump(mode="json", exclude_defaults=True), ensure_ascii=False)
    return f"[{format_timestamp(raw.time)}] {raw.type} (self_id={raw.self_id}) {truncate(payload)}"


# =============================================================================
# call
# =============================================================================


@main.command()
@click.argument("endpoint")
@click.option("--params", "-p", default=None, help="Request body as a JSON object")
@click.option("--rest", "rest_gateway", help="Command endpoint (default: $EMI_REST_GATEWAY)")
@click.option("--token", "access_token", help="Access token (default: $EMI_ACCESS_TOKEN)")
@click.option("--retries", "max_retries", type=int, help="Maximum retries for failed attempts")
def call(
    endpoint: str,
    params: str | None,
    rest_gateway: str | None,
    access_token: str | None,
    max_retries: int | None,
) -> None:
    """Issue a single command and print its result as JSON.

    Examples:

        emi-transport call get_login_info

        emi-transport call send_private_message -p '{"user_id": 1, "message": []}'
    """
    request: dict[str, Any] | None = None
    if params:
        try:
            request = json.loads(params)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"not valid JSON: {e}", param_hint="--params") from e
        if not isinstance(request, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--params")

    config = TransportConfig.from_env(
        rest_gateway=rest_gateway,
        access_token=access_token,
        max_retries=max_retries,
    )

    try:
        result = asyncio.run(_call(config, endpoint, request))
    except CommandError as e:
        click.echo(f"Command failed: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(result, indent=2, ensure_ascii=False))


async def _call(config: TransportConfig, endpoint: str, request: dict[str, Any] | None) -> Any:
    async with HttpClient(
        config.rest_gateway,
        config.access_token,
        timeout=config.timeout,
        max_retries=config.max_retries,
        base_retry_delay=config.base_retry_delay,
        max_retry_delay=config.max_retry_delay,
        max_retry_jitter=config.max_retry_jitter,
    ) as client:
        return await client.post(endpoint, request)


if __name__ == "__main__":
    main()

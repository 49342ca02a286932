"""Transport configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

ENV_PREFIX = "EMI_"


@dataclass
class TransportConfig:
    """Configuration shared by the event stream and the command client.

    Durations are in seconds.
    """

    # Gateways
    ws_gateway: str = "ws://127.0.0.1:3000/event"
    rest_gateway: str = "http://127.0.0.1:3000/api"
    access_token: str = ""

    # Command client
    timeout: float = 10.0
    max_retries: int = 5
    base_retry_delay: float = 0.1
    max_retry_delay: float = 5.0
    max_retry_jitter: float = 0.1

    # Reconnection (off by default; a closed stream stays closed)
    auto_reconnect: bool = False
    reconnect_delay: float = 1.0
    max_reconnect_delay: float = 30.0
    reconnect_backoff: float = 2.0
    max_reconnect_attempts: int = 0  # 0 = unlimited

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: object) -> TransportConfig:
        """Build a config from ``EMI_*`` environment variables.

        ``EMI_WS_GATEWAY`` maps to ``ws_gateway`` and so on. Explicit keyword
        overrides win over the environment; ``None`` overrides are ignored.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            values[f.name] = _coerce(f.type, raw)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]


def _coerce(type_name: object, raw: str) -> object:
    # Annotations are strings under ``from __future__ import annotations``
    name = type_name if isinstance(type_name, str) else getattr(type_name, "__name__", "")
    if name == "bool":
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if name == "int":
        return int(raw)
    if name == "float":
        return float(raw)
    return raw

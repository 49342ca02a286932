"""Logging setup.

Modules log through ``logging.getLogger(__name__)``. This module only adds
the TRACE level used for very chatty dispatch messages and a helper that
routes everything to stderr for the CLI.
"""

from __future__ import annotations

import logging
import sys

TRACE = 5

logging.addLevelName(TRACE, "TRACE")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def trace(logger: logging.Logger, msg: str, *args: object) -> None:
    """Log ``msg`` at TRACE level."""
    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, msg, *args)


def parse_level(level: str | int) -> int:
    """Turn a level name such as ``"debug"`` or ``"trace"`` into a number."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_logging(level: str | int = logging.INFO) -> None:
    """Send all log records to stderr.

    Stdout is left alone so the CLI can print events and command results
    there without log lines mixed in.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(stderr_handler)
    root_logger.setLevel(parse_level(level))

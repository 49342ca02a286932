"""Exception types raised by the transport layer.

Connection-state and command failures surface to the caller as one of
these. Per-frame and per-event decode problems never raise; they are
logged and skipped by the receive and dispatch loops.
"""

from __future__ import annotations


class TransportError(Exception):
    """Base class for all emi_transport errors."""


class AlreadyConnectedError(TransportError, ConnectionError):
    """Raised when opening an event source that is already open."""

    def __init__(self, message: str = "already connected"):
        super().__init__(message)


class EventRegistryExistsError(TransportError, KeyError):
    """Raised when an event type identifier is registered twice."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"event registry already exists: {event_type}")

    def __str__(self) -> str:
        return self.args[0]


class CommandError(TransportError):
    """A command call failed."""


class HTTPStatusError(CommandError):
    """The gateway answered with a status code outside [200, 300)."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"unexpected status code {status_code}, response body: {body}")


class MaxRetriesExceededError(CommandError):
    """Every attempt of a command call failed."""

    def __init__(self, endpoint: str, attempts: int, last_error: BaseException):
        self.endpoint = endpoint
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"max retries exceeded for {endpoint} after {attempts} attempts: {last_error}")

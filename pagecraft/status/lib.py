"""Status events for generation progress.

Every stage of a generation request reports progress through a
``StatusEmitter``: a plain ``(status_prefix, message)`` callable passed
explicitly down the call chain. Sinks decide where the events go.
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

StatusEmitter = Callable[[str, str], None]

STATUS_LOGGER_NAME = "pagecraft.status"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class StatusEvent:
    """One progress event.

    Attributes:
        status_prefix: Channel name such as ``layout-processing`` or ``error``.
        message: Human-readable progress text.
        timestamp: ISO-8601 UTC time the event was emitted.
    """

    status_prefix: str
    message: str
    timestamp: str = field(default_factory=_now)

    def to_message(self) -> dict[str, Any]:
        """Streaming wire form of the event."""
        return {
            "type": "status",
            "status": self.status_prefix,
            "message": self.message,
            "timestamp": self.timestamp,
        }


class CommunicationMode(str, Enum):
    """How a request reports progress back to its caller."""

    WEBSOCKET = "websocket"
    REST_API = "rest_api"


class Connection(Protocol):
    """A client connection that accepts text frames."""

    id: str

    def send(self, message: str) -> None: ...


class LoggingStatusSink:
    """Writes events to the ``pagecraft.status`` logger as ``[prefix] message``."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(STATUS_LOGGER_NAME)

    def __call__(self, status_prefix: str, message: str) -> None:
        self._logger.info("[%s] %s", status_prefix, message)


class ConnectionStatusSink:
    """Sends each event to one connection as a JSON status frame."""

    def __init__(self, connection: Connection):
        self.connection = connection

    def __call__(self, status_prefix: str, message: str) -> None:
        event = StatusEvent(status_prefix, message)
        self.connection.send(json.dumps(event.to_message()))


class CollectingStatusSink:
    """Keeps every event in emission order."""

    def __init__(self) -> None:
        self.events: list[StatusEvent] = []

    def __call__(self, status_prefix: str, message: str) -> None:
        self.events.append(StatusEvent(status_prefix, message))

    def messages(self, status_prefix: str | None = None) -> list[str]:
        """Messages of all events, optionally only those of one prefix."""
        return [
            e.message
            for e in self.events
            if status_prefix is None or e.status_prefix == status_prefix
        ]

    @property
    def prefixes(self) -> list[str]:
        return [e.status_prefix for e in self.events]


class QueueStatusSink:
    """Pushes events onto an ``asyncio.Queue`` for a concurrent consumer.

    The producer calls ``close()`` when done; ``events()`` then stops.
    """

    def __init__(self, queue: "asyncio.Queue[StatusEvent | None] | None" = None):
        self.queue: asyncio.Queue[StatusEvent | None] = queue or asyncio.Queue()

    def __call__(self, status_prefix: str, message: str) -> None:
        self.queue.put_nowait(StatusEvent(status_prefix, message))

    def close(self) -> None:
        self.queue.put_nowait(None)

    async def events(self) -> AsyncIterator[StatusEvent]:
        while True:
            event = await self.queue.get()
            if event is None:
                return
            yield event


def combine_emitters(*emitters: StatusEmitter) -> StatusEmitter:
    """Emitter that forwards each event to every given emitter in order."""

    def emit(status_prefix: str, message: str) -> None:
        for emitter in emitters:
            emitter(status_prefix, message)

    return emit


def create_status_emitter(
    mode: CommunicationMode, connection: Connection | None = None
) -> StatusEmitter:
    """Create the emitter for one request.

    Args:
        mode: Communication mode of the request.
        connection: Client connection, used in websocket mode.

    Returns:
        A connection sink in websocket mode with a connection, otherwise a
        logging sink.
    """
    if mode == CommunicationMode.WEBSOCKET and connection is not None:
        return ConnectionStatusSink(connection)
    return LoggingStatusSink()


__all__ = [
    "StatusEmitter",
    "StatusEvent",
    "CommunicationMode",
    "Connection",
    "LoggingStatusSink",
    "ConnectionStatusSink",
    "CollectingStatusSink",
    "QueueStatusSink",
    "combine_emitters",
    "create_status_emitter",
    "STATUS_LOGGER_NAME",
]

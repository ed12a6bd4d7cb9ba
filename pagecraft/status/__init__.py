"""Status events and sinks for generation progress."""

from .lib import (
    STATUS_LOGGER_NAME,
    CollectingStatusSink,
    CommunicationMode,
    Connection,
    ConnectionStatusSink,
    LoggingStatusSink,
    QueueStatusSink,
    StatusEmitter,
    StatusEvent,
    combine_emitters,
    create_status_emitter,
)

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

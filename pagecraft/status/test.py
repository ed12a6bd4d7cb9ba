"""Tests for status events and sinks."""

import json
import logging

import pytest

from .lib import (
    STATUS_LOGGER_NAME,
    CollectingStatusSink,
    CommunicationMode,
    ConnectionStatusSink,
    LoggingStatusSink,
    QueueStatusSink,
    StatusEvent,
    combine_emitters,
    create_status_emitter,
)


class FakeConnection:
    def __init__(self, connection_id: str = "c1"):
        self.id = connection_id
        self.sent: list[str] = []

    def send(self, message: str) -> None:
        self.sent.append(message)


class TestSinks:
    """Tests for the individual sinks."""

    @pytest.mark.unit
    def test_collecting_sink_keeps_order(self):
        sink = CollectingStatusSink()
        sink("layout-processing", "one")
        sink("error", "two")
        sink("layout-processing", "three")
        assert sink.prefixes == ["layout-processing", "error", "layout-processing"]
        assert sink.messages("layout-processing") == ["one", "three"]

    @pytest.mark.unit
    def test_connection_sink_sends_status_frames(self):
        connection = FakeConnection()
        ConnectionStatusSink(connection)("layout-design", "Starting")
        frame = json.loads(connection.sent[0])
        assert frame["type"] == "status"
        assert frame["status"] == "layout-design"
        assert frame["message"] == "Starting"
        assert "timestamp" in frame

    @pytest.mark.unit
    def test_logging_sink_format(self, caplog):
        with caplog.at_level(logging.INFO, logger=STATUS_LOGGER_NAME):
            LoggingStatusSink()("init", "ready")
        assert "[init] ready" in caplog.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_queue_sink_drains_until_closed(self):
        sink = QueueStatusSink()
        sink("a", "1")
        sink("b", "2")
        sink.close()
        events = [event async for event in sink.events()]
        assert [(e.status_prefix, e.message) for e in events] == [("a", "1"), ("b", "2")]

    @pytest.mark.unit
    def test_combine_emitters(self):
        first, second = CollectingStatusSink(), CollectingStatusSink()
        combine_emitters(first, second)("x", "y")
        assert first.messages() == second.messages() == ["y"]

    @pytest.mark.unit
    def test_event_wire_form(self):
        event = StatusEvent("error", "boom", timestamp="2026-01-01T00:00:00+00:00")
        assert event.to_message() == {
            "type": "status",
            "status": "error",
            "message": "boom",
            "timestamp": "2026-01-01T00:00:00+00:00",
        }


class TestCreateStatusEmitter:
    """Tests for emitter selection by mode."""

    @pytest.mark.unit
    def test_websocket_with_connection(self):
        emitter = create_status_emitter(CommunicationMode.WEBSOCKET, FakeConnection())
        assert isinstance(emitter, ConnectionStatusSink)

    @pytest.mark.unit
    def test_rest_mode_logs(self):
        emitter = create_status_emitter(CommunicationMode.REST_API, FakeConnection())
        assert isinstance(emitter, LoggingStatusSink)

    @pytest.mark.unit
    def test_websocket_without_connection_logs(self):
        assert isinstance(
            create_status_emitter(CommunicationMode.WEBSOCKET), LoggingStatusSink
        )

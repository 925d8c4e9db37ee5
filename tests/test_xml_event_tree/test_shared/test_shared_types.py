"""Tests for shared exception, diagnostic and logging types."""

import logging

import pytest

from xml_event_tree.shared import (
    BuildMetrics,
    DiagnosticEntry,
    DiagnosticSeverity,
    FileReadError,
    LexicalError,
    TransportError,
    XMLTreeError,
    get_logger,
)


class TestErrors:
    """Test the exception hierarchy."""

    def test_file_read_error_is_an_io_error(self):
        error = FileReadError("File not found: x.xml", "x.xml")

        assert isinstance(error, XMLTreeError)
        assert isinstance(error, IOError)
        assert error.file_path == "x.xml"
        assert str(error) == "File not found: x.xml"

    def test_transport_error_carries_status(self):
        error = TransportError("bad status", url="http://x", status_code=503)

        assert isinstance(error, XMLTreeError)
        assert error.status_code == 503
        assert error.url == "http://x"

    def test_lexical_error_carries_position(self):
        error = LexicalError("mismatched tag", line=4, column=9)

        assert (error.line, error.column) == (4, 9)


class TestDiagnostics:
    """Test diagnostic entries and build metrics."""

    def test_empty_message_raises_error(self):
        with pytest.raises(ValueError, match="message cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.ERROR, "", "builder")

    def test_empty_component_raises_error(self):
        with pytest.raises(ValueError, match="component cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.ERROR, "oops", "")

    def test_events_per_second(self):
        assert BuildMetrics().events_per_second == 0.0
        assert BuildMetrics(processing_time_ms=500, events_processed=10).events_per_second == 20.0


class TestCorrelationLogger:
    """Test correlation-aware logging."""

    def test_records_carry_component_and_correlation_id(self, caplog):
        logger = get_logger("xml_event_tree.test", "req-1", "unit")

        with caplog.at_level(logging.INFO, logger="xml_event_tree.test"):
            logger.info("hello", extra={"count": 3})

        record = caplog.records[-1]
        assert record.component == "unit"
        assert record.correlation_id == "req-1"
        assert record.count == 3

    def test_component_defaults_to_last_name_part(self):
        assert get_logger("xml_event_tree.tree.builder").component == "builder"

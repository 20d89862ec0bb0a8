"""Unit tests for structured logging utilities."""

import json
import logging
import pytest
from io import StringIO

from writing_style.utils.logging import (
    get_logger,
    get_run_id,
    set_run_id,
    setup_logging,
    log_embedding_batch,
    StructuredFormatter,
    HumanFormatter,
    ContextLogger,
)


def _record(msg="Test", level=logging.INFO, name="test", exc_info=None):
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=exc_info
    )


def _capture(name):
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())

    base_logger = logging.getLogger(name)
    base_logger.handlers.clear()
    base_logger.addHandler(handler)
    base_logger.setLevel(logging.DEBUG)
    base_logger.propagate = False
    return ContextLogger(base_logger, {}), stream


class TestRunId:
    """Test run ID management."""

    def test_set_and_get_run_id(self):
        set_run_id("run-123")
        assert get_run_id() == "run-123"

    def test_generate_run_id(self):
        generated = set_run_id()
        assert generated is not None
        assert len(generated) == 8
        assert get_run_id() == generated


class TestStructuredFormatter:
    """Test JSON log formatter."""

    def test_basic_format(self):
        formatter = StructuredFormatter()
        data = json.loads(formatter.format(_record("Test message", name="test.logger")))

        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["message"] == "Test message"
        assert "timestamp" in data

    def test_includes_run_id(self):
        set_run_id("run-456")
        data = json.loads(StructuredFormatter().format(_record()))

        assert data.get("run_id") == "run-456"

    def test_includes_extra_data(self):
        record = _record()
        record.extra_data = {"key1": "value1", "key2": 42}

        data = json.loads(StructuredFormatter().format(record))

        assert data["key1"] == "value1"
        assert data["key2"] == 42

    def test_includes_exception(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            import sys
            exc_info = sys.exc_info()

        data = json.loads(StructuredFormatter().format(
            _record("Error occurred", level=logging.ERROR, exc_info=exc_info)
        ))

        assert "ValueError" in data["exception"]


class TestHumanFormatter:
    """Test human-readable log formatter."""

    def test_basic_format(self):
        output = HumanFormatter().format(_record("Test message", name="test.logger"))

        assert "INFO" in output
        assert "test.logger" in output
        assert "Test message" in output

    def test_includes_extra_data(self):
        record = _record()
        record.extra_data = {"key": "value"}

        assert "key=value" in HumanFormatter().format(record)


class TestContextLogger:
    """Test context-aware logger."""

    def test_get_logger(self):
        assert isinstance(get_logger("test.module"), ContextLogger)

    def test_logging_with_extra_data(self):
        logger, stream = _capture("test_extra_data")
        logger.info("Test message", extra_data={"custom": "value"})

        data = json.loads(stream.getvalue().strip())

        assert data["custom"] == "value"


class TestSetupLogging:
    """Test logging setup."""

    def test_setup_debug_level(self):
        setup_logging(level="DEBUG", json_format=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_setup_json_format(self):
        setup_logging(level="INFO", json_format=True)
        root = logging.getLogger()
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_setup_human_format(self):
        setup_logging(level="INFO", json_format=False)
        root = logging.getLogger()
        assert isinstance(root.handlers[0].formatter, HumanFormatter)

    def test_quiets_third_party_loggers(self):
        setup_logging(level="DEBUG")
        assert logging.getLogger("chromadb").level == logging.WARNING


class TestLogEmbeddingBatch:
    """Test embedding batch logging helper."""

    def test_successful_batch_logged_at_debug(self):
        logger, stream = _capture("test_batch_ok")
        log_embedding_batch(logger, "all-MiniLM-L6-v2", batch_start=32, batch_size=32, duration_ms=120)

        data = json.loads(stream.getvalue().strip())

        assert data["level"] == "DEBUG"
        assert data["model"] == "all-MiniLM-L6-v2"
        assert data["batch_start"] == 32
        assert data["failed"] == 0

    def test_failed_batch_logged_at_warning(self):
        logger, stream = _capture("test_batch_fail")
        log_embedding_batch(
            logger, "nomic-embed-text", batch_start=0, batch_size=8,
            duration_ms=900, failed=2, error="timeout"
        )

        data = json.loads(stream.getvalue().strip())

        assert data["level"] == "WARNING"
        assert data["failed"] == 2
        assert data["error"] == "timeout"

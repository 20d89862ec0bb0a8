"""Structured logging infrastructure for the writing style pipeline."""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Context variable for pipeline run tracking
_run_id: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def get_run_id() -> Optional[str]:
    """Get the current run ID."""
    return _run_id.get()


def set_run_id(run_id: Optional[str] = None) -> str:
    """Set a new run ID, generating one if not provided."""
    if run_id is None:
        run_id = str(uuid.uuid4())[:8]
    _run_id.set(run_id)
    return run_id


class StructuredFormatter(logging.Formatter):
    """JSON-formatted log output for production use."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        run_id = get_run_id()
        if run_id:
            log_data["run_id"] = run_id

        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class HumanFormatter(logging.Formatter):
    """Human-readable log output for development."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        run_id = get_run_id()
        run_str = f"[{run_id}] " if run_id else ""

        color = self.COLORS.get(record.levelname, "")
        level = f"{color}{record.levelname:8}{self.RESET}"

        message = record.getMessage()

        extra_str = ""
        if hasattr(record, "extra_data") and record.extra_data:
            extra_items = [f"{k}={v}" for k, v in record.extra_data.items()]
            extra_str = f" | {', '.join(extra_items)}"

        return f"{level} {run_str}{record.name}: {message}{extra_str}"


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that supports structured extra data."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra_data = kwargs.pop("extra_data", {})

        extra = kwargs.get("extra", {})
        extra["extra_data"] = extra_data
        kwargs["extra"] = extra

        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Get a structured logger for the given name."""
    logger = logging.getLogger(name)
    return ContextLogger(logger, {})


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> None:
    """Set up logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, use JSON format; otherwise human-readable
        log_file: Optional file path for logging output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    root_logger.handlers.clear()

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = HumanFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        # File logs are always JSON
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    # Suppress noisy third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("chromadb").setLevel(logging.WARNING)
    logging.getLogger("sentence_transformers").setLevel(logging.WARNING)


def log_embedding_batch(
    logger: ContextLogger,
    model: str,
    batch_start: int,
    batch_size: int,
    duration_ms: int,
    failed: int = 0,
    error: Optional[str] = None
) -> None:
    """Log an embedding batch call with structured data."""
    extra = {
        "model": model,
        "batch_start": batch_start,
        "batch_size": batch_size,
        "duration_ms": duration_ms,
        "failed": failed,
    }
    if error:
        extra["error"] = error

    if failed:
        logger.warning(
            f"Embedding batch at {batch_start} finished with {failed}/{batch_size} failures",
            extra_data=extra
        )
    else:
        logger.debug(
            f"Embedded batch at {batch_start}: {batch_size} chunks in {duration_ms}ms",
            extra_data=extra
        )

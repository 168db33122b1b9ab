# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Veilshare Contributors

"""Structured logging configuration for Veilshare.

Provides:
- JSON formatter for production (machine-parseable)
- Standard formatter for development (human-readable)
- Correlation IDs tying together the log lines of one registry operation
- Operation logging with confidential plaintexts redacted
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Correlation ID of the registry operation in progress, if any."""
    return _correlation_id.get()


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Generator[str, None, None]:
    """Scope a correlation ID over one registry operation.

    Example:
        with correlation_context() as cid:
            logger.info("Granting access")  # Will include cid
    """
    token = _correlation_id.set(correlation_id or str(uuid.uuid4()))
    try:
        yield _correlation_id.get()
    finally:
        _correlation_id.reset(token)


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log files and non-tty output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        if record.levelno >= logging.WARNING:
            log_data["source"] = {"file": record.pathname, "line": record.lineno}

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_data["extra"] = record.extra_data

        return json.dumps(log_data, default=str)


class StandardFormatter(logging.Formatter):
    """Plain text lines prefixed with the short correlation ID."""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = get_correlation_id()
        if not correlation_id:
            return super().format(record)
        # Copy so other handlers see the untouched record
        record = logging.makeLogRecord(record.__dict__)
        record.msg = f"[{correlation_id[:8]}] {record.msg}"
        return super().format(record)


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Install Veilshare's handlers on the root logger.

    Arguments left as None fall back to VEILSHARE_LOG_LEVEL,
    VEILSHARE_LOG_FORMAT ("json" or "text"; JSON when stderr is not a tty)
    and VEILSHARE_LOG_FILE. Files always get JSON.
    """
    from .config import get_config

    config = get_config()

    level = config.log_level if level is None else level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_format is None:
        log_format = config.log_format.lower()
        json_format = log_format == "json" or (log_format != "text" and not sys.stderr.isatty())

    log_file = config.log_file if log_file is None else log_file

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(JSONFormatter() if json_format else StandardFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)


class OperationLogger:
    """Logger for registry operations.

    Logs operation calls with confidential plaintext parameters redacted,
    so wrapped values never leak into log output.
    """

    CONFIDENTIAL_PARAMS = {
        "value",
        "quality_score",
        "new_score",
        "budget",
        "amount",
        "plaintext",
    }

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("veilshare.operations")

    def log_call(
        self,
        operation: str,
        arguments: dict[str, Any],
        level: int = logging.DEBUG,
    ) -> None:
        """Log an operation call with sanitized parameters.

        Args:
            operation: Name of the registry operation
            arguments: Operation arguments (will be sanitized)
            level: Log level
        """
        sanitized = self._sanitize(arguments)
        self.logger.log(
            level,
            f"Operation call: {operation}",
            extra={
                "extra_data": {
                    "operation": operation,
                    "arguments": sanitized,
                }
            },
        )

    def log_result(
        self,
        operation: str,
        success: bool,
        error: str | None = None,
        level: int = logging.DEBUG,
        read_only: bool = False,
    ) -> None:
        """Log an operation outcome.

        Args:
            operation: Name of the registry operation
            success: Whether the transaction committed or the read was allowed
            error: Exception class name on failure
            level: Log level
            read_only: Report "allowed"/"denied" instead of "committed"/"aborted"
        """
        if read_only:
            status = "allowed" if success else "denied"
        else:
            status = "committed" if success else "aborted"
        msg = f"Operation result: {operation} -> {status}"
        if error:
            msg += f" ({error})"

        self.logger.log(
            level,
            msg,
            extra={
                "extra_data": {
                    "operation": operation,
                    "success": success,
                    "error": error,
                }
            },
        )

    def _sanitize(self, data: Any) -> Any:
        """Recursively redact confidential parameters."""
        if isinstance(data, dict):
            result = {}
            for key, value in data.items():
                if key.lower() in self.CONFIDENTIAL_PARAMS:
                    result[key] = "[REDACTED]"
                else:
                    result[key] = self._sanitize(value)
            return result
        elif isinstance(data, list):
            return [self._sanitize(item) for item in data]
        elif isinstance(data, str) and len(data) > 500:
            return data[:500] + "..."
        else:
            return data


# Default operation logger
operation_logger = OperationLogger()

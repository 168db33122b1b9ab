"""Tests for veilshare.core.logging module."""

from __future__ import annotations

import json
import logging

import pytest

from veilshare.core.logging import (
    JSONFormatter,
    OperationLogger,
    StandardFormatter,
    configure_logging,
    correlation_context,
    get_correlation_id,
)


def _record(msg: str = "hello", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="veilshare.test",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )


# ============================================================================
# Correlation ID Tests
# ============================================================================


class TestCorrelationId:
    def test_default_none(self):
        assert get_correlation_id() is None

    def test_context_generates_unique_ids(self):
        with correlation_context() as first, correlation_context() as second:
            assert first != second
            assert len(first) == 36

    def test_context_generates_and_resets(self):
        with correlation_context() as cid:
            assert get_correlation_id() == cid
        assert get_correlation_id() is None

    def test_context_uses_given_id(self):
        with correlation_context("op-123") as cid:
            assert cid == "op-123"
            assert get_correlation_id() == "op-123"


# ============================================================================
# Formatter Tests
# ============================================================================


class TestJSONFormatter:
    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "veilshare.test"
        assert data["message"] == "hello"
        assert "source" not in data

    def test_includes_correlation_id(self):
        with correlation_context("cid-1"):
            data = json.loads(JSONFormatter().format(_record()))
        assert data["correlation_id"] == "cid-1"

    def test_warning_includes_source(self):
        data = json.loads(JSONFormatter().format(_record(level=logging.WARNING)))
        assert data["source"]["line"] == 10

    def test_extra_data(self):
        record = _record()
        record.extra_data = {"operation": "grant_data_access"}
        data = json.loads(JSONFormatter().format(record))
        assert data["extra"] == {"operation": "grant_data_access"}


class TestStandardFormatter:
    def test_prefixes_short_correlation_id(self):
        formatter = StandardFormatter()
        with correlation_context("abcdef123456"):
            output = formatter.format(_record())
        assert "[abcdef12] hello" in output

    def test_does_not_mutate_record(self):
        record = _record()
        with correlation_context("abcdef123456"):
            StandardFormatter().format(record)
        assert record.msg == "hello"


# ============================================================================
# configure_logging Tests
# ============================================================================


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_json_format(self, clean_env):
        configure_logging(json_format=True)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_env_format_text(self, clean_env, monkeypatch):
        monkeypatch.setenv("VEILSHARE_LOG_FORMAT", "text")
        configure_logging()
        assert isinstance(logging.getLogger().handlers[0].formatter, StandardFormatter)

    def test_env_level(self, clean_env, monkeypatch):
        monkeypatch.setenv("VEILSHARE_LOG_LEVEL", "WARNING")
        configure_logging(json_format=True)
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler_uses_json(self, clean_env, tmp_path):
        log_file = tmp_path / "veilshare.log"
        configure_logging(json_format=False, log_file=str(log_file))
        handlers = logging.getLogger().handlers
        assert len(handlers) == 2
        assert isinstance(handlers[1].formatter, JSONFormatter)
        handlers[1].close()


# ============================================================================
# OperationLogger Tests
# ============================================================================


class TestOperationLogger:
    def test_redacts_confidential_params(self):
        sanitized = OperationLogger()._sanitize(
            {"caller": "did:example:alice", "value": 12345, "quality_score": 85, "metadata_hash": "QmHash"}
        )
        assert sanitized == {
            "caller": "did:example:alice",
            "value": "[REDACTED]",
            "quality_score": "[REDACTED]",
            "metadata_hash": "QmHash",
        }

    def test_redacts_nested(self):
        sanitized = OperationLogger()._sanitize({"batch": [{"amount": 1000, "dataset_id": 1}]})
        assert sanitized == {"batch": [{"amount": "[REDACTED]", "dataset_id": 1}]}

    def test_truncates_long_strings(self):
        sanitized = OperationLogger()._sanitize({"topic": "x" * 600})
        assert sanitized["topic"] == "x" * 500 + "..."

    def test_log_call_and_result(self, caplog):
        op_logger = OperationLogger(logging.getLogger("veilshare.test.ops"))
        with caplog.at_level(logging.DEBUG, logger="veilshare.test.ops"):
            op_logger.log_call("distribute_reward", {"amount": 1000})
            op_logger.log_result("distribute_reward", success=False, error="AuthorizationError")

        assert "Operation call: distribute_reward" in caplog.records[0].getMessage()
        assert caplog.records[0].extra_data["arguments"] == {"amount": "[REDACTED]"}
        assert caplog.records[1].getMessage() == "Operation result: distribute_reward -> aborted (AuthorizationError)"

    def test_read_only_result_wording(self, caplog):
        op_logger = OperationLogger(logging.getLogger("veilshare.test.ops"))
        with caplog.at_level(logging.DEBUG, logger="veilshare.test.ops"):
            op_logger.log_result("access_dataset", success=True, read_only=True)
            op_logger.log_result("access_dataset", success=False, error="StateError", read_only=True)

        assert [r.getMessage() for r in caplog.records] == [
            "Operation result: access_dataset -> allowed",
            "Operation result: access_dataset -> denied (StateError)",
        ]

"""Tests for logging_config.py module."""

import logging
from unittest.mock import patch

import colorlog
import pytest

from ircwire.logging_config import (
    ErrorAggregator,
    LoggerConfigurator,
    error_aggregator,
    log_structured_error,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


class TestLoggerConfigurator:
    def test_configure_installs_colored_handler(self, restore_root_logger):
        with patch("atexit.register"):
            LoggerConfigurator().configure(debug=False)
        root = restore_root_logger
        assert root.level == logging.INFO
        assert any(isinstance(h.formatter, colorlog.ColoredFormatter) for h in root.handlers)
        assert logging.getLogger("asyncio").level == logging.ERROR

    def test_debug_from_environment(self, restore_root_logger, monkeypatch):
        monkeypatch.setenv("DEBUG", "true")
        with patch("atexit.register"):
            LoggerConfigurator().configure()
        assert restore_root_logger.level == logging.DEBUG

    def test_summary_at_exit_can_be_disabled(self, restore_root_logger):
        with patch("atexit.register") as mock_register:
            LoggerConfigurator({"summary_at_exit": False}).configure(debug=False)
        mock_register.assert_not_called()


class TestErrorAggregator:
    def test_counts_by_category(self):
        agg = ErrorAggregator()
        agg.record_error("framing", "first")
        agg.record_error("framing", "second", {"truncated": 3})
        agg.record_error("transport", "reset")
        summary = agg.get_error_summary()
        assert summary["framing"]["total_count"] == 2
        assert summary["framing"]["last_occurrence"]["context"] == {"truncated": 3}
        assert summary["transport"]["total_count"] == 1

    def test_keeps_bounded_history(self):
        agg = ErrorAggregator(keep=3)
        for i in range(10):
            agg.record_error("framing", f"e{i}")
        assert [e["message"] for e in agg.errors["framing"]] == ["e7", "e8", "e9"]

    def test_summary_report(self, caplog):
        agg = ErrorAggregator()
        with caplog.at_level(logging.INFO):
            agg.log_summary_report()
            assert "No errors recorded" in caplog.text
            agg.record_error("network", "refused")
            agg.log_summary_report()
        assert "network: 1 total" in caplog.text

    def test_reset(self):
        agg = ErrorAggregator()
        agg.record_error("framing", "x")
        agg.reset()
        assert agg.get_error_summary() == {}


def test_log_structured_error_records_and_logs(caplog):
    error_aggregator.reset()
    with caplog.at_level(logging.WARNING):
        log_structured_error(
            "transport",
            "Write failed",
            exception=ConnectionResetError("reset"),
            context={"server": "srv"},
            level=logging.WARNING,
        )
    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.getMessage() == (
        "[TRANSPORT] Write failed | Exception: ConnectionResetError: reset | Context: server=srv"
    )
    assert error_aggregator.get_error_summary()["transport"]["total_count"] == 1

"""
tests/test_logging_config.py

Tests for the structured logging helpers (component_10_logging_config.py).
"""

import logging
from unittest.mock import Mock

import pytest

from component_10_logging_config import (
    GOAPLogFormatter,
    PerformanceLogger,
    StructuredLogger,
    get_logger,
)


def make_record(**extra_info):
    record = logging.LogRecord(
        name="goap.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Plan found",
        args=(),
        exc_info=None,
    )
    if extra_info:
        record.extra_info = extra_info
    return record


class TestFormatter:
    def test_extra_rendered_as_pairs(self):
        line = GOAPLogFormatter().format(make_record(plan_length=2, expansions=5))
        assert "[INFO    ] [goap.test] Plan found" in line
        assert line.endswith(" | plan_length=2 | expansions=5")

    def test_extra_can_be_suppressed(self):
        line = GOAPLogFormatter(include_extra=False).format(make_record(plan_length=2))
        assert line.endswith("Plan found")

    def test_colors(self):
        line = GOAPLogFormatter(use_colors=True).format(make_record())
        assert line.startswith("\033[32m")
        assert line.endswith("\033[0m")


class TestStructuredLogger:
    def test_get_logger(self):
        logger = get_logger("goap.test")
        assert isinstance(logger, StructuredLogger)
        assert logger.logger.name == "goap.test"

    def test_extra_moved_to_extra_info(self):
        logger = get_logger("goap.test")
        msg, kwargs = logger.process("hello", {"extra": {"nodes": 3}})
        assert msg == "hello"
        assert kwargs["extra"] == {"extra_info": {"nodes": 3}}

    def test_without_extra(self):
        _, kwargs = get_logger("goap.test").process("hello", {})
        assert "extra" not in kwargs


class TestPerformanceLogger:
    def test_success_logs_start_and_end(self):
        target = Mock()
        with PerformanceLogger(target, "Backward search", objects=2):
            pass
        messages = [call.args[0] for call in target.debug.call_args_list]
        assert messages[0] == "START: Backward search"
        assert messages[1].startswith("END: Backward search")
        target.error.assert_not_called()

    def test_failure_logged_and_propagated(self):
        target = Mock()
        with pytest.raises(ValueError):
            with PerformanceLogger(target, "Backward search"):
                raise ValueError("boom")
        target.error.assert_called_once()
        assert target.error.call_args.kwargs["extra"]["extra_info"]["error"] == "boom"

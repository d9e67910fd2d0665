"""Tests for logging setup."""

import json
import logging
import sys

import pytest
from rich.logging import RichHandler

from admitwriter.log import JSONFormatter, configure_logging


def _record(msg="hello %s", args=("world",), exc_info=None):
    return logging.LogRecord(
        name="admitwriter.writer.orchestrator",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


class TestJSONFormatter:
    def test_single_line_json(self):
        line = JSONFormatter().format(_record())
        entry = json.loads(line)
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "admitwriter.writer.orchestrator"
        assert entry["message"] == "hello world"
        assert "timestamp" in entry
        assert "\n" not in line

    def test_includes_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(exc_info=sys.exc_info())
        entry = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in entry["exception"]


class TestConfigureLogging:
    def test_text_uses_rich_handler(self):
        configure_logging("debug", "text")
        logger = logging.getLogger("admitwriter")
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert isinstance(logger.handlers[0], RichHandler)

    def test_json_uses_json_formatter(self):
        configure_logging("warn", "json")
        logger = logging.getLogger("admitwriter")
        assert logger.level == logging.WARNING
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_quiets_httpx(self):
        configure_logging()
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_rejects_unknown_format(self):
        with pytest.raises(ValueError, match="log format"):
            configure_logging("info", "xml")

    def test_rejects_unknown_level(self):
        with pytest.raises(ValueError, match="log level"):
            configure_logging("loud")

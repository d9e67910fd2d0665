"""Logging setup for the admitwriter CLI.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the entry point.
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _stderr_rich_handler(**kwargs) -> RichHandler:
    return RichHandler(console=Console(stderr=True), **kwargs)


def _logging_config(level: int, fmt: str) -> dict:
    if fmt == "json":
        handler = {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stderr",
        }
    else:
        handler = {
            "()": _stderr_rich_handler,
            "formatter": "rich",
            "show_path": False,
            "rich_tracebacks": True,
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JSONFormatter},
            "rich": {"format": "%(name)s: %(message)s", "datefmt": "[%X]"},
        },
        "handlers": {"console": handler},
        "loggers": {
            "admitwriter": {"level": level, "handlers": ["console"], "propagate": False},
            "httpx": {"level": logging.WARNING},
        },
    }


def configure_logging(level: str = "info", fmt: str = "text") -> None:
    """Route admitwriter logs to stderr as rich text or JSON lines."""
    if fmt not in ("text", "json"):
        raise ValueError(f"Unsupported log format: {fmt!r}")
    try:
        numeric = _LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"Unsupported log level: {level!r}") from None
    logging.config.dictConfig(_logging_config(numeric, fmt))

from __future__ import annotations

import logging
import time
from logging.config import dictConfig
from typing import Iterable

from settings import get_settings

# Keys the services pass through ``extra=`` that belong on the log line.
TELEMETRY_CONTEXT_KEYS = (
    "operation",
    "record_kind",
    "record_id",
    "collection",
    "path",
    "reason",
)

_LINE_FORMAT = "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s"

_configured = False


def _render_value(value: object) -> str:
    text = str(value)
    if not text or any(char.isspace() for char in text):
        return repr(text)
    return text


class TelemetryFormatter(logging.Formatter):
    """UTC timestamps, with request context rendered as ``key=value`` pairs."""

    converter = time.gmtime

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        context_keys: Iterable[str] = TELEMETRY_CONTEXT_KEYS,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.context_keys = tuple(context_keys)

    def context_of(self, record: logging.LogRecord) -> list[str]:
        pairs = []
        for key in self.context_keys:
            value = record.__dict__.get(key)
            if value is not None:
                pairs.append(f"{key}={_render_value(value)}")
        return pairs

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = self.context_of(record)
        return f"{line} | {' '.join(pairs)}" if pairs else line


def configure_logging(level: str | int | None = None) -> None:
    """Install the telemetry formatter on the root logger once per process."""
    global _configured
    if _configured:
        return

    log_level = level if level is not None else get_settings().log_level
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "telemetry": {
                    "()": "logging_config.TelemetryFormatter",
                    "fmt": _LINE_FORMAT,
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "telemetry",
                }
            },
            "loggers": {
                "uvicorn.access": {"level": "WARNING"},
            },
            "root": {"handlers": ["stderr"], "level": log_level},
        }
    )
    _configured = True

"""Logging helpers for confseq runs."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from logging import Handler
from logging.config import dictConfig
from pathlib import Path
from typing import Any

import msgspec

from .settings import SessionConfig

LOG_FILE_ENV = "CONFSEQ_LOG_FILE"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_LOG_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _serialise_value(value: Any) -> Any:
    """Serialise extras for JSON logs, keeping payload bytes readable."""
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.hex(" ").upper()
    return str(value)


class LogLine(msgspec.Struct, omit_defaults=True):
    """One structured log line; empty optional fields are left out."""

    ts: str
    level: str
    logger: str
    message: str
    device: str | None = None
    extra: dict[str, Any] | None = None
    exception: str | None = None


class StructuredLogFormatter(logging.Formatter):
    """JSON-per-line formatter tagging every record with the device under test."""

    PREFIX = "confseq."

    def __init__(self, device_id: str | None = None) -> None:
        super().__init__()
        self.device_id = device_id

    def _short_name(self, name: str) -> str:
        return name.removeprefix(self.PREFIX)

    def format(self, record: logging.LogRecord) -> str:
        extras = {
            key: _serialise_value(value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOG_KEYS and not key.startswith("_")
        }
        line = LogLine(
            ts=datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            level=record.levelname,
            logger=self._short_name(record.name),
            message=record.getMessage(),
            device=self.device_id,
            extra=extras or None,
            exception=self.formatException(record.exc_info) if record.exc_info else None,
        )
        return msgspec.json.encode(line).decode("utf-8")


def _build_handler() -> Handler:
    log_file = os.environ.get(LOG_FILE_ENV)
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path, encoding="utf-8")
    return logging.StreamHandler()


def configure_logging(config: SessionConfig) -> None:
    """Route all records through one structured handler, tagged with the session device."""

    level_name = "DEBUG" if config.debug_logging else "INFO"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": "confseq.config.logging.StructuredLogFormatter",
                    "device_id": config.device_id,
                }
            },
            "handlers": {
                "confseq": {
                    "()": _build_handler,
                    "level": level_name,
                    "formatter": "structured",
                }
            },
            "root": {
                "level": level_name,
                "handlers": ["confseq"],
            },
        }
    )

    logging.getLogger("confseq").info("Logging configured at level %s", level_name)

"""General-purpose utilities for confseq."""

from __future__ import annotations

import logging

__all__ = ["log_payload"]

_MAX_LOGGED_PAYLOAD = 512


def log_payload(logger_instance: logging.Logger, level: int, label: str, data: bytes) -> None:
    """Log a channel payload, truncated, without paying for it when disabled.

    Format: [PAYLOAD] %s: %s
    """
    if not logger_instance.isEnabledFor(level):
        return

    text = data[:_MAX_LOGGED_PAYLOAD].decode("utf-8", errors="replace")
    if len(data) > _MAX_LOGGED_PAYLOAD:
        text += f"... ({len(data)} bytes)"
    logger_instance.log(level, "[PAYLOAD] %s: %s", label, text)

"""Configuration helpers for confseq sessions."""

from .settings import SessionConfig, load_session_config  # noqa: F401
from . import logging, schema, settings  # noqa: F401  # pyright: ignore[reportUnusedImport]

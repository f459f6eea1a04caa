"""JSON encoding helpers shared by the mirrors, router and recorder."""

from __future__ import annotations

from typing import Any, TypeVar

import msgspec

from ..const import TIMESTAMP_FIELD

T = TypeVar("T")


def strip_timestamp(payload: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``payload`` without its non-semantic timestamp."""
    return {key: value for key, value in payload.items() if key != TIMESTAMP_FIELD}


def encode_canonical(value: Any) -> bytes:
    """Encode with sorted keys so equal documents always compare equal."""
    return msgspec.json.encode(value, order="sorted")


def encode_pretty(value: Any) -> bytes:
    """Indented JSON used for capture files."""
    return msgspec.json.format(msgspec.json.encode(value), indent=2)


def decode_typed(payload: dict[str, Any], target: type[T]) -> T:
    """Convert a decoded JSON object into ``target``, ignoring its timestamp."""
    return msgspec.convert(strip_timestamp(payload), target)


__all__ = ["decode_typed", "encode_canonical", "encode_pretty", "strip_timestamp"]

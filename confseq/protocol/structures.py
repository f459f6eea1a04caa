"""Typed payload model for device configuration and state documents.

Unknown fields are ignored on decode so newer devices can report more than
this model knows about; fields left at their defaults are omitted on encode.
"""

from __future__ import annotations

from typing import Any

import msgspec


class SystemConfig(msgspec.Struct, omit_defaults=True):
    min_loglevel: int | None = None
    metrics_rate_sec: int | None = None


class PointConfig(msgspec.Struct, omit_defaults=True):
    set_value: Any = None


class PointsetConfig(msgspec.Struct, omit_defaults=True):
    etag: str | None = None
    sample_rate_sec: int | None = None
    sample_limit_sec: int | None = None
    points: dict[str, PointConfig] = msgspec.field(default_factory=dict)


class Config(msgspec.Struct, omit_defaults=True):
    """Desired device configuration, one attribute per sub-block."""

    version: str | None = None
    system: SystemConfig | None = None
    pointset: PointsetConfig | None = None


class Firmware(msgspec.Struct, omit_defaults=True):
    version: str | None = None


class SystemState(msgspec.Struct, omit_defaults=True):
    make_model: str | None = None
    serial_no: str | None = None
    firmware: Firmware | None = None
    last_config: str | None = None
    operational: bool | None = None


class PointState(msgspec.Struct, omit_defaults=True):
    value_state: str | None = None
    status: dict[str, Any] | None = None


class PointsetState(msgspec.Struct, omit_defaults=True):
    etag: str | None = None
    points: dict[str, PointState] = msgspec.field(default_factory=dict)


class State(msgspec.Struct, omit_defaults=True):
    """Last reported device state, one attribute per sub-folder."""

    version: str | None = None
    system: SystemState | None = None
    pointset: PointsetState | None = None


__all__ = [
    "Config",
    "Firmware",
    "PointConfig",
    "PointState",
    "PointsetConfig",
    "PointsetState",
    "State",
    "SystemConfig",
    "SystemState",
]

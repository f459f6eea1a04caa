"""Session settings loader.

Identity and broker settings come from ``validator_config.json``; the registry
id comes from ``<site_model>/cloud_iot_config.json``. Both are read once
before any sequence runs and never change afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import msgspec
from marshmallow import Schema, ValidationError

from ..const import (
    CLOUD_IOT_CONFIG_FILE,
    DEFAULT_CONNECT_ATTEMPTS,
    DEFAULT_DEBUG_LOGGING,
    DEFAULT_MQTT_HOST,
    DEFAULT_MQTT_PORT,
    DEFAULT_MQTT_TOPIC,
    DEFAULT_OUT_DIR,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_TEST_TIMEOUT,
    DEVICES_OUT_DIR,
    RESULT_LOG_FILE,
    VALIDATOR_CONFIG_FILE,
)
from ..errors import StartupConfigError
from .schema import CloudIotConfigSchema, ValidatorConfigSchema

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SessionConfig:
    """Strongly typed, immutable configuration for one harness session."""

    project_id: str
    site_model: str
    device_id: str
    serial_no: str
    key_file: str
    registry_id: str
    cloud_region: str | None = None
    mqtt_host: str = DEFAULT_MQTT_HOST
    mqtt_port: int = DEFAULT_MQTT_PORT
    mqtt_user: str | None = None
    mqtt_pass: str | None = field(default=None, repr=False)
    mqtt_tls: bool = False
    mqtt_cafile: str | None = None
    mqtt_certfile: str | None = None
    mqtt_topic: str = DEFAULT_MQTT_TOPIC
    connect_attempts: int = DEFAULT_CONNECT_ATTEMPTS
    reconnect_delay: int = DEFAULT_RECONNECT_DELAY
    test_timeout: float = DEFAULT_TEST_TIMEOUT
    out_dir: str = DEFAULT_OUT_DIR
    debug_logging: bool = DEFAULT_DEBUG_LOGGING

    @property
    def device_out_dir(self) -> Path:
        return Path(self.out_dir) / DEVICES_OUT_DIR / self.device_id

    @property
    def result_log(self) -> Path:
        return self.device_out_dir / RESULT_LOG_FILE


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = msgspec.json.decode(path.read_bytes())
    except (OSError, msgspec.DecodeError) as exc:
        raise StartupConfigError(f"While loading {path.absolute()}: {exc}") from exc
    if not isinstance(data, dict):
        raise StartupConfigError(f"While loading {path.absolute()}: expected a JSON object")
    return data


def _load_with(schema: Schema, path: Path) -> dict[str, Any]:
    try:
        return schema.load(_read_json(path))
    except ValidationError as exc:
        problems = "; ".join(
            f"{name}: {' '.join(map(str, messages))}"
            for name, messages in sorted(exc.normalized_messages().items())
        )
        raise StartupConfigError(f"While loading {path.absolute()}: {problems}") from exc


def load_session_config(path: str | Path = VALIDATOR_CONFIG_FILE) -> SessionConfig:
    """Load and validate the session configuration, failing fast on gaps."""

    config_path = Path(path)
    validator = _load_with(ValidatorConfigSchema(), config_path)
    registry = _load_with(
        CloudIotConfigSchema(),
        Path(validator["site_model"]) / CLOUD_IOT_CONFIG_FILE,
    )

    config = SessionConfig(**validator, **registry)
    if not config.mqtt_tls and config.mqtt_user:
        logger.warning(
            "MQTT TLS is disabled; MQTT credentials will be sent in plaintext."
        )
    logger.debug("Loaded session configuration from %s", config_path)
    return config


__all__ = ["SessionConfig", "load_session_config"]

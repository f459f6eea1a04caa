"""Marshmallow schemas for the validator and registry configuration files."""

from __future__ import annotations

from typing import Any, Dict

from marshmallow import EXCLUDE, Schema, fields, pre_load, validate

from ..const import (
    DEFAULT_CONNECT_ATTEMPTS,
    DEFAULT_DEBUG_LOGGING,
    DEFAULT_MQTT_HOST,
    DEFAULT_MQTT_PORT,
    DEFAULT_MQTT_TOPIC,
    DEFAULT_OUT_DIR,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_TEST_TIMEOUT,
)


class ValidatorConfigSchema(Schema):
    """Session identity plus broker and harness settings."""

    class Meta:
        unknown = EXCLUDE

    # Identity
    project_id = fields.Str(required=True, validate=validate.Length(min=1))
    site_model = fields.Str(required=True, validate=validate.Length(min=1))
    device_id = fields.Str(required=True, validate=validate.Length(min=1))
    serial_no = fields.Str(required=True, validate=validate.Length(min=1))
    key_file = fields.Str(required=True, validate=validate.Length(min=1))

    # MQTT
    mqtt_host = fields.Str(load_default=DEFAULT_MQTT_HOST, validate=validate.Length(min=1))
    mqtt_port = fields.Int(load_default=DEFAULT_MQTT_PORT, validate=validate.Range(min=1, max=65535))
    mqtt_user = fields.Str(load_default=None, allow_none=True)
    mqtt_pass = fields.Str(load_default=None, allow_none=True)
    mqtt_tls = fields.Bool(load_default=False)
    mqtt_cafile = fields.Str(load_default=None, allow_none=True)
    mqtt_certfile = fields.Str(load_default=None, allow_none=True)
    mqtt_topic = fields.Str(load_default=DEFAULT_MQTT_TOPIC, validate=validate.Length(min=1))
    connect_attempts = fields.Int(load_default=DEFAULT_CONNECT_ATTEMPTS, validate=validate.Range(min=1))
    reconnect_delay = fields.Int(load_default=DEFAULT_RECONNECT_DELAY, validate=validate.Range(min=1))

    # Harness
    test_timeout = fields.Float(load_default=DEFAULT_TEST_TIMEOUT, validate=validate.Range(min=0.1))
    out_dir = fields.Str(load_default=DEFAULT_OUT_DIR, validate=validate.Length(min=1))
    debug_logging = fields.Bool(load_default=DEFAULT_DEBUG_LOGGING)

    @pre_load
    def normalize_topic(self, data: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        if "mqtt_topic" in data and isinstance(data["mqtt_topic"], str):
            segments = [segment for segment in data["mqtt_topic"].split("/") if segment]
            # An all-slash prefix collapses to "" and fails the length check.
            data["mqtt_topic"] = "/".join(segments)
        return data


class CloudIotConfigSchema(Schema):
    """Registry description stored alongside the site model."""

    class Meta:
        unknown = EXCLUDE

    registry_id = fields.Str(required=True, validate=validate.Length(min=1))
    cloud_region = fields.Str(load_default=None, allow_none=True)


__all__ = ["CloudIotConfigSchema", "ValidatorConfigSchema"]

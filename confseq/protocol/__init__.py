"""Payload model, encoding and topic helpers."""

from .encoding import decode_typed, encode_canonical, encode_pretty, strip_timestamp
from .structures import Config, PointsetConfig, PointsetState, State, SystemConfig, SystemState
from .topics import SubType, config_topic, device_topic, message_base, parse_topic, topic_path

__all__ = [
    "Config",
    "PointsetConfig",
    "PointsetState",
    "State",
    "SubType",
    "SystemConfig",
    "SystemState",
    "config_topic",
    "decode_typed",
    "device_topic",
    "encode_canonical",
    "encode_pretty",
    "message_base",
    "parse_topic",
    "strip_timestamp",
    "topic_path",
]

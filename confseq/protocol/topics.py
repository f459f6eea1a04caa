"""Channel topic helpers.

Outbound topics are ``<prefix>/<deviceId>/<topic>``. Inbound topics are
``<prefix>/<deviceId>/<subType>[/<subFolder>]`` and are parsed into the
string-keyed attributes the router consumes.
"""

from __future__ import annotations

from enum import StrEnum

import msgspec

from ..const import (
    ATTR_DEVICE_ID,
    ATTR_SUB_FOLDER,
    ATTR_SUB_TYPE,
    CONFIG_TOPIC_PREFIX,
    DEFAULT_SUB_FOLDER,
)


_DOT_SEGMENTS = frozenset({".", ".."})


class SubType(StrEnum):
    STATES = "states"
    CONFIG = "config"
    STATE = "state"


class TopicRoute(msgspec.Struct, frozen=True):
    """Parsed representation of an inbound channel topic."""

    raw: str
    device_id: str
    sub_type: str
    sub_folder: str

    def attributes(self) -> dict[str, str]:
        return {
            ATTR_DEVICE_ID: self.device_id,
            ATTR_SUB_FOLDER: self.sub_folder,
            ATTR_SUB_TYPE: self.sub_type,
        }


def _split_segments(path: str) -> tuple[str, ...]:
    if not path:
        return ()
    return tuple(segment for segment in path.split("/") if segment)


def topic_path(prefix: str, *segments: str) -> str:
    """Join prefix and sub-segments into a topic path."""
    parts = list(_split_segments(prefix))
    for segment in segments:
        parts.extend(_split_segments(segment))
    if not parts:
        raise ValueError("topic cannot be empty")
    return "/".join(parts)


def config_topic(sub_block: str) -> str:
    """e.g. config/system"""
    return topic_path(CONFIG_TOPIC_PREFIX, sub_block)


def device_topic(prefix: str, device_id: str, topic: str) -> str:
    """e.g. udmi/AHU-1/config/system"""
    return topic_path(prefix, device_id, topic)


def subscription_filter(prefix: str) -> str:
    """Wildcard covering every device sharing the channel prefix."""
    return topic_path(prefix, "#")


def message_base(attributes: dict[str, str]) -> str:
    """Capture file stem for a message, ``<subFolder>_<subType>``."""
    return f"{attributes.get(ATTR_SUB_FOLDER)}_{attributes.get(ATTR_SUB_TYPE)}"


def parse_topic(prefix: str, topic_name: str) -> TopicRoute | None:
    """Parse an inbound topic into a TopicRoute, or None if it is foreign or malformed.

    Only one sub-folder level is accepted and dot segments are rejected.
    """
    prefix_segments = _split_segments(prefix)
    topic_segments = _split_segments(topic_name)
    if topic_segments[: len(prefix_segments)] != prefix_segments:
        return None
    remainder = topic_segments[len(prefix_segments) :]
    if not 2 <= len(remainder) <= 3:
        return None
    # Segments end up in capture file names.
    if any(segment in _DOT_SEGMENTS for segment in remainder):
        return None
    device_id, sub_type = remainder[0], remainder[1]
    sub_folder = remainder[2] if len(remainder) == 3 else DEFAULT_SUB_FOLDER
    return TopicRoute(
        raw=topic_name,
        device_id=device_id,
        sub_type=sub_type,
        sub_folder=sub_folder,
    )


__all__ = [
    "SubType",
    "TopicRoute",
    "config_topic",
    "device_topic",
    "message_base",
    "parse_topic",
    "subscription_filter",
    "topic_path",
]

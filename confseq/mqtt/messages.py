"""Channel message envelopes."""

from __future__ import annotations

from typing import Any

import msgspec

from ..const import ATTR_DEVICE_ID, ATTR_SUB_FOLDER, ATTR_SUB_TYPE, DEFAULT_MQTT_QOS


class InboundMessage(msgspec.Struct):
    """A decoded message as delivered by the channel client."""

    payload: dict[str, Any]
    attributes: dict[str, str]
    topic_name: str = ""

    @property
    def device_id(self) -> str | None:
        return self.attributes.get(ATTR_DEVICE_ID)

    @property
    def sub_folder(self) -> str | None:
        return self.attributes.get(ATTR_SUB_FOLDER)

    @property
    def sub_type(self) -> str | None:
        return self.attributes.get(ATTR_SUB_TYPE)


class OutboundPublish(msgspec.Struct, frozen=True):
    """A publish request addressed to one device."""

    device_id: str
    topic_name: str
    payload: bytes
    qos: int = DEFAULT_MQTT_QOS
    retain: bool = False


__all__ = ["InboundMessage", "OutboundPublish"]

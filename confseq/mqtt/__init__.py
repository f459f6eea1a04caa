"""MQTT envelopes and property builders for confseq."""

from __future__ import annotations

from paho.mqtt.packettypes import PacketTypes
from paho.mqtt.properties import Properties

from .messages import InboundMessage, OutboundPublish

__all__ = [
    "InboundMessage",
    "OutboundPublish",
    "build_mqtt_connect_properties",
    "build_mqtt_publish_properties",
]


def build_mqtt_publish_properties(message: OutboundPublish) -> Properties:
    """Tag JSON publishes so brokers and bridges can forward them verbatim."""

    props = Properties(PacketTypes.PUBLISH)
    props.ContentType = "application/json"
    props.PayloadFormatIndicator = 1
    props.UserProperty = [("deviceId", message.device_id)]
    return props


def build_mqtt_connect_properties() -> Properties:
    """Return default CONNECT properties for aiomqtt/paho clients."""

    props = Properties(PacketTypes.CONNECT)
    props.SessionExpiryInterval = 0
    props.RequestProblemInformation = 1
    return props

"""Transport layer for confseq."""

from .channel import ChannelClient
from .mqtt import MqttChannelClient

__all__ = ["ChannelClient", "MqttChannelClient"]

"""Channel client interface consumed by the sequencing core."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..mqtt.messages import InboundMessage


@runtime_checkable
class ChannelClient(Protocol):
    """Publish/subscribe channel shared with the device under test."""

    async def publish(self, device_id: str, topic: str, payload: bytes) -> None:
        """Publish ``payload`` to ``topic`` of ``device_id``.

        Raises TransportError when the publish cannot be delivered.
        """
        ...

    def is_active(self) -> bool:
        """Return True while messages can be exchanged."""
        ...

    async def next_message(self) -> InboundMessage:
        """Wait for the next inbound message; cancellable."""
        ...


__all__ = ["ChannelClient"]

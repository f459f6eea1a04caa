"""Blocking wait that pumps the channel until a predicate holds."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..errors import TransportError
from ..transport.channel import ChannelClient
from .router import MessageRouter

logger = logging.getLogger("confseq.waiter")

Predicate = Callable[[], bool]


class WaitEngine:
    """Routes one message at a time until the caller's predicate is satisfied.

    There is no deadline here. The sequence watchdog cancels the pending
    ``next_message`` call, and :attr:`waiting_condition` is left in place so
    the timeout can say what was being waited for.
    """

    def __init__(self, channel: ChannelClient, router: MessageRouter) -> None:
        self._channel = channel
        self._router = router
        self.waiting_condition: str | None = None

    async def wait_until(self, predicate: Predicate, description: str) -> None:
        self.waiting_condition = f"waiting for {description}"
        logger.info(self.waiting_condition)
        while not predicate():
            await self._receive_message()
        logger.info("done %s", self.waiting_condition)
        self.waiting_condition = None

    async def _receive_message(self) -> None:
        if not self._channel.is_active():
            raise TransportError("Trying to receive message from inactive client")
        message = await self._channel.next_message()
        self._router.route_message(message)


__all__ = ["Predicate", "WaitEngine"]

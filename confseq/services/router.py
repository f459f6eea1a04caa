"""Inbound message demultiplexer."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import msgspec

from ..const import ATTR_DEVICE_ID, ATTR_SUB_FOLDER, ATTR_SUB_TYPE
from ..mqtt.messages import InboundMessage
from ..protocol.encoding import decode_typed
from ..protocol.structures import Config, State
from ..protocol.topics import SubType, message_base
from ..state.latch import SerialLatch
from ..state.mirror import StateMirror
from .recorder import ResultRecorder

logger = logging.getLogger("confseq.router")

Handler = Callable[[str | None, dict[str, Any]], bool]


class MessageRouter:
    """Archive every message of the device under test and fold ``states`` updates.

    ``config`` and ``state`` sub-types are echoes and aggregate snapshots;
    they are logged for diagnosis and never change the mirror or raise.
    """

    def __init__(
        self,
        *,
        device_id: str,
        test_name: str,
        recorder: ResultRecorder,
        state_mirror: StateMirror,
        latch: SerialLatch,
    ) -> None:
        self._device_id = device_id
        self._test_name = test_name
        self._recorder = recorder
        self._mirror = state_mirror
        self._latch = latch
        self._handlers: Mapping[str, Handler] = {
            SubType.STATES: self._update_state,
            SubType.CONFIG: self._dump_config,
            SubType.STATE: self._dump_state,
        }

    def route_message(self, message: InboundMessage) -> bool:
        return self.route(message.payload, message.attributes)

    def route(self, payload: dict[str, Any], attributes: dict[str, str]) -> bool:
        """Handle one inbound message; True if the state mirror changed."""
        if attributes.get(ATTR_DEVICE_ID) != self._device_id:
            return False

        logger.info("received %s", message_base(attributes))
        self._recorder.capture(self._test_name, payload, attributes)

        handler = self._handlers.get(attributes.get(ATTR_SUB_TYPE, ""))
        if handler is None:
            return False
        return handler(attributes.get(ATTR_SUB_FOLDER), payload)

    def _update_state(self, sub_folder: str | None, payload: dict[str, Any]) -> bool:
        if not self._mirror.apply(sub_folder, payload):
            return False
        system = self._mirror.state.system
        self._latch.observe(system.serial_no if system is not None else None)
        return True

    def _dump_config(self, _sub_folder: str | None, payload: dict[str, Any]) -> bool:
        try:
            config = decode_typed(payload, Config)
        except (msgspec.ValidationError, TypeError) as exc:
            logger.warning("Ignoring malformed config echo: %s", exc)
            return False
        etag = config.pointset.etag if config.pointset is not None else None
        logger.info("update config etag %s", etag)
        return False

    def _dump_state(self, _sub_folder: str | None, payload: dict[str, Any]) -> bool:
        try:
            state = decode_typed(payload, State)
        except (msgspec.ValidationError, TypeError) as exc:
            logger.warning("Ignoring malformed state snapshot: %s", exc)
            return False
        etag = state.pointset.etag if state.pointset is not None else None
        logger.info("update state etag %s", etag)
        return False


__all__ = ["MessageRouter"]

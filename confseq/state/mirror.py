"""Config and state mirrors with per-partition deduplication.

Both mirrors are driven by a table of :class:`BlockSpec` entries keyed by
partition name. Adding a sub-block means adding a field to the payload model
and a row to the table.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import msgspec

from ..errors import SerializationError
from ..protocol.encoding import encode_canonical, strip_timestamp
from ..protocol.structures import (
    Config,
    PointsetConfig,
    PointsetState,
    State,
    SystemConfig,
    SystemState,
)
from ..protocol.topics import config_topic
from ..transport.channel import ChannelClient

logger = logging.getLogger("confseq.state.mirror")


@dataclass(frozen=True, slots=True)
class BlockSpec:
    """Typed entry for one config sub-block or state sub-folder."""

    target: type[msgspec.Struct]
    describe: Callable[[Any], str]


CONFIG_BLOCKS: Mapping[str, BlockSpec] = MappingProxyType(
    {
        "system": BlockSpec(SystemConfig, lambda block: f"system loglevel {block.min_loglevel}"),
        "pointset": BlockSpec(PointsetConfig, lambda block: f"pointset etag {block.etag}"),
    }
)

STATE_FOLDERS: Mapping[str, BlockSpec] = MappingProxyType(
    {
        "system": BlockSpec(SystemState, lambda folder: f"state last_config {folder.last_config}"),
        "pointset": BlockSpec(PointsetState, lambda folder: f"state etag {folder.etag}"),
    }
)


class ConfigMirror:
    """Desired configuration plus the last form of each sub-block sent."""

    def __init__(
        self,
        channel: ChannelClient,
        device_id: str,
        blocks: Mapping[str, BlockSpec] = CONFIG_BLOCKS,
    ) -> None:
        self.config = Config()
        self._channel = channel
        self._device_id = device_id
        self._blocks = blocks
        self._sent: dict[str, bytes] = {}

    @property
    def sent(self) -> Mapping[str, bytes]:
        return MappingProxyType(self._sent)

    async def synchronize(self, config: Config | None = None) -> dict[str, bool]:
        """Publish every sub-block whose serialized form changed.

        Returns, per sub-block name, whether a publish happened.
        """
        if config is None:
            config = self.config
        return {
            name: await self._synchronize_block(name, spec, getattr(config, name, None))
            for name, spec in self._blocks.items()
        }

    async def _synchronize_block(self, name: str, spec: BlockSpec, block: Any) -> bool:
        try:
            data = encode_canonical(block)
        except (msgspec.EncodeError, TypeError, ValueError) as exc:
            raise SerializationError(f"While updating config block {name}: {exc}") from exc

        if data == self._sent.get(name):
            return False

        logger.info("sending %s_config", name)
        await self._channel.publish(self._device_id, config_topic(name), data)
        self._sent[name] = data
        if block is not None:
            logger.info("updated %s", spec.describe(block))
        return True


class StateMirror:
    """Last observed device state plus the last form of each sub-folder processed."""

    def __init__(self, folders: Mapping[str, BlockSpec] = STATE_FOLDERS) -> None:
        self.state = State()
        self._folders = folders
        self._received: dict[str, bytes] = {}

    @property
    def received(self) -> Mapping[str, bytes]:
        return MappingProxyType(self._received)

    def apply(self, sub_folder: str | None, payload: dict[str, Any]) -> bool:
        """Fold a ``states`` payload into the mirror; True if it changed anything."""
        spec = self._folders.get(sub_folder or "")
        if spec is None:
            logger.debug("No state handler for sub-folder %s", sub_folder)
            return False

        stripped = strip_timestamp(payload)
        try:
            data = encode_canonical(stripped)
            if data == self._received.get(sub_folder):
                return False
            value = msgspec.convert(stripped, spec.target)
        except (msgspec.ValidationError, msgspec.EncodeError, TypeError, ValueError) as exc:
            raise SerializationError(f"While converting state type {sub_folder}: {exc}") from exc

        logger.info("updating %s state", sub_folder)
        setattr(self.state, sub_folder, value)
        self._received[sub_folder] = data
        logger.info("received %s", spec.describe(value))
        return True


__all__ = [
    "BlockSpec",
    "CONFIG_BLOCKS",
    "ConfigMirror",
    "STATE_FOLDERS",
    "StateMirror",
]

"""Process-wide session context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..config.settings import SessionConfig
from ..transport.channel import ChannelClient

if TYPE_CHECKING:
    from ..services.recorder import ResultRecorder


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Identity, channel and result log shared by every sequence of a run.

    Built once before the first sequence and passed explicitly to the runner.
    """

    config: SessionConfig
    channel: ChannelClient
    recorder: ResultRecorder

    @property
    def device_id(self) -> str:
        return self.config.device_id

    @property
    def serial_no(self) -> str:
        return self.config.serial_no


__all__ = ["SessionContext"]

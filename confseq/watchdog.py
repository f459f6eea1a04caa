"""Per-sequence deadline for confseq runs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from types import TracebackType
from typing import TYPE_CHECKING

from transitions import Machine

from .const import DEFAULT_TEST_TIMEOUT
from .errors import SequenceTimeout

ConditionProbe = Callable[[], "str | None"]


def _no_condition() -> str | None:
    return None


class SequenceWatchdog:
    """Cancel the enclosed sequence once its deadline passes.

    The deadline is an :func:`asyncio.timeout`, so expiry cancels whatever the
    sequence is awaiting (normally the channel's ``next_message``). On expiry
    the cancellation is turned into :class:`SequenceTimeout` carrying the
    condition reported by ``describe``.
    """

    if TYPE_CHECKING:
        # FSM generated methods and attributes for static analysis
        fsm_state: str
        arm: Callable[[], None]
        disarm: Callable[[], None]
        expire: Callable[[], None]

    # FSM States
    STATE_IDLE = "idle"
    STATE_ARMED = "armed"
    STATE_EXPIRED = "expired"
    STATE_DISARMED = "disarmed"

    def __init__(
        self,
        timeout: float = DEFAULT_TEST_TIMEOUT,
        *,
        describe: ConditionProbe = _no_condition,
        logger: logging.Logger | None = None,
    ) -> None:
        self._timeout = timeout
        self._describe = describe
        self._logger = logger or logging.getLogger("confseq.watchdog")
        self._deadline: asyncio.Timeout | None = None

        self.state_machine = Machine(
            model=self,
            states=[
                self.STATE_IDLE,
                self.STATE_ARMED,
                self.STATE_EXPIRED,
                self.STATE_DISARMED,
            ],
            initial=self.STATE_IDLE,
            ignore_invalid_triggers=True,
            model_attribute="fsm_state",
        )

        self.state_machine.add_transition(trigger="arm", source=self.STATE_IDLE, dest=self.STATE_ARMED)
        self.state_machine.add_transition(trigger="expire", source=self.STATE_ARMED, dest=self.STATE_EXPIRED)
        self.state_machine.add_transition(trigger="disarm", source=self.STATE_ARMED, dest=self.STATE_DISARMED)

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def expired(self) -> bool:
        return self.fsm_state == self.STATE_EXPIRED

    async def __aenter__(self) -> SequenceWatchdog:
        self._deadline = asyncio.timeout(self._timeout)
        await self._deadline.__aenter__()
        self.arm()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        deadline, self._deadline = self._deadline, None
        if deadline is None:
            return
        try:
            await deadline.__aexit__(exc_type, exc, tb)
        except TimeoutError as timeout_exc:
            self.expire()
            condition = self._describe()
            message = f"timeout {condition}" if condition else "timeout"
            self._logger.warning("Sequence deadline of %.1fs expired: %s", self._timeout, message)
            raise SequenceTimeout(message) from timeout_exc
        self.disarm()


__all__ = ["SequenceWatchdog"]

"""Serial number latch guarding against cross-talk on a shared channel."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from transitions import Machine

from ..errors import IdentityViolation

logger = logging.getLogger("confseq.state.latch")


class SerialLatch:
    """Locks onto the expected serial number once the device first reports it.

    Mismatches before locking are start-up noise (the device has not caught up
    or another instance is still reporting). Mismatches after locking raise
    :class:`IdentityViolation`.
    """

    if TYPE_CHECKING:
        fsm_state: str
        lock: Callable[[], bool]

    # FSM States
    STATE_UNLOCKED = "unlocked"
    STATE_LOCKED = "locked"

    def __init__(self, expected_serial: str) -> None:
        self.expected_serial = expected_serial
        self._valid = False

        self.state_machine = Machine(
            model=self,
            states=[self.STATE_UNLOCKED, self.STATE_LOCKED],
            initial=self.STATE_UNLOCKED,
            ignore_invalid_triggers=True,
            model_attribute="fsm_state",
        )
        self.state_machine.add_transition(trigger="lock", source=self.STATE_UNLOCKED, dest=self.STATE_LOCKED)

    @property
    def locked(self) -> bool:
        return self.fsm_state == self.STATE_LOCKED

    def is_valid(self) -> bool:
        """Whether the most recent serial equalled the expected one."""
        return self._valid

    def observe(self, serial_no: str | None) -> bool:
        valid = serial_no == self.expected_serial
        self._valid = valid
        if not valid:
            if self.locked:
                raise IdentityViolation(f"Unexpected serial_no {serial_no}")
            return False
        if not self.locked:
            self.lock()
            logger.info("serial_no %s confirmed; latch locked", serial_no)
        return True


__all__ = ["SerialLatch"]

"""Sequences exercising the system block."""

from __future__ import annotations

from ..services.sequence import SequenceTest
from .registry import sequence


@sequence
async def valid_serial_no(test: SequenceTest) -> None:
    await test.update_config()
    await test.until_true(test.valid_serial_no, "received serial no")


@sequence
async def system_last_config(test: SequenceTest) -> None:
    await test.update_config()

    def reported() -> bool:
        system = test.state.system
        return test.valid_serial_no() and system is not None and system.last_config is not None

    await test.until_true(reported, "state last_config")


@sequence
async def system_min_loglevel(test: SequenceTest) -> None:
    await test.update_config()
    await test.until_true(test.valid_serial_no, "received serial no")

    assert test.config.system is not None
    test.config.system.min_loglevel = 200
    updates = await test.update_config()
    assert updates["system"], "system config was not re-sent"
    assert not updates["pointset"], "pointset config was re-sent unchanged"

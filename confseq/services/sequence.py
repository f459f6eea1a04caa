"""Sequence setup, teardown and verdicts."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping

from ..const import EMPTY_MESSAGE, INITIAL_MIN_LOGLEVEL, PASS_MESSAGE, STATE_QUERY_TOPIC
from ..errors import SequenceTimeout
from ..protocol.structures import Config, State, SystemConfig
from ..state.context import SessionContext
from ..state.latch import SerialLatch
from ..state.mirror import ConfigMirror, StateMirror
from ..watchdog import SequenceWatchdog
from .recorder import Result, SequenceOutcome
from .router import MessageRouter
from .waiter import Predicate, WaitEngine

logger = logging.getLogger("confseq.sequence")


class SequenceTest:
    """Everything one sequence owns. Created at setup, dropped at teardown."""

    def __init__(self, context: SessionContext, name: str) -> None:
        self.name = name
        self.context = context
        self.config_mirror = ConfigMirror(context.channel, context.device_id)
        self.state_mirror = StateMirror()
        self.latch = SerialLatch(context.serial_no)
        self.router = MessageRouter(
            device_id=context.device_id,
            test_name=name,
            recorder=context.recorder,
            state_mirror=self.state_mirror,
            latch=self.latch,
        )
        self.waiter = WaitEngine(context.channel, self.router)

    @property
    def config(self) -> Config:
        return self.config_mirror.config

    @property
    def state(self) -> State:
        return self.state_mirror.state

    @property
    def waiting_condition(self) -> str | None:
        return self.waiter.waiting_condition

    async def update_config(self) -> dict[str, bool]:
        return await self.config_mirror.synchronize()

    async def query_state(self) -> None:
        await self.context.channel.publish(self.context.device_id, STATE_QUERY_TOPIC, EMPTY_MESSAGE)

    def valid_serial_no(self) -> bool:
        return self.latch.is_valid()

    async def until_true(self, predicate: Predicate, description: str) -> None:
        await self.waiter.wait_until(predicate, description)


SequenceBody = Callable[[SequenceTest], Awaitable[None]]


def _failure_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class SequenceRunner:
    """Runs sequences one after another, each inside its own watchdog."""

    def __init__(self, context: SessionContext) -> None:
        self.context = context

    async def setup(self, name: str) -> SequenceTest:
        test = SequenceTest(self.context, name)
        await test.update_config()
        # Set after the initial push so the first update_config() sends it.
        test.config.system = SystemConfig(min_loglevel=INITIAL_MIN_LOGLEVEL)
        await test.query_state()
        return test

    def teardown(self, test: SequenceTest | None) -> None:
        if test is not None:
            logger.debug("discarding mirrors of %s", test.name)

    async def run(self, name: str, body: SequenceBody) -> SequenceOutcome:
        logger.info("starting test %s", name)
        test: SequenceTest | None = None

        def describe() -> str | None:
            return test.waiting_condition if test is not None else None

        try:
            async with SequenceWatchdog(self.context.config.test_timeout, describe=describe):
                test = await self.setup(name)
                await body(test)
        except SequenceTimeout as exc:
            result, message = Result.FAIL, str(exc)
        except Exception as exc:
            # Sequence boundary: any failure fails this sequence only.
            logger.debug("test %s raised", name, exc_info=True)
            result, message = Result.FAIL, _failure_message(exc)
        else:
            result, message = Result.PASS, PASS_MESSAGE
        finally:
            self.teardown(test)
            test = None

        if result is Result.PASS:
            logger.info("passed test %s", name)
        else:
            logger.warning("failed %s", message)
        return self.context.recorder.record(result, name, message)

    async def run_all(self, sequences: Mapping[str, SequenceBody]) -> list[SequenceOutcome]:
        return [await self.run(name, body) for name, body in sequences.items()]


__all__ = ["SequenceBody", "SequenceRunner", "SequenceTest"]

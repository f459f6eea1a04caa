#!/usr/bin/env python3
"""Entry point and orchestration for a confseq session.

Architecture:
    main() -> SequenceHarness.run()
        ├── ResultRecorder.reset()      (fresh RESULT.log and tests/ tree)
        ├── MqttChannelClient           (connect + subscribe, retried)
        └── SequenceRunner.run_all()    (one watchdog per sequence)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Mapping, Sequence
from typing import Any, NoReturn

import uvloop

from .config.logging import configure_logging
from .config.settings import SessionConfig, load_session_config
from .const import VALIDATOR_CONFIG_FILE
from .errors import StartupConfigError, TransportError
from .services.recorder import Result, ResultRecorder, SequenceOutcome
from .services.sequence import SequenceBody, SequenceRunner
from .sequences import SEQUENCES, select_sequences
from .state.context import SessionContext
from .transport.mqtt import MqttChannelClient

logger = logging.getLogger("confseq")


class SequenceHarness:
    """Owns the process-wide resources of one session.

    Attributes:
        config: Validated session configuration.
        channel: Channel client shared by every sequence.
        recorder: Result log and capture tree of the device under test.
    """

    def __init__(self, config: SessionConfig, *, channel: Any = None) -> None:
        self.config = config
        self.channel = channel if channel is not None else MqttChannelClient(config)
        self.recorder = ResultRecorder(config.device_out_dir)

    async def run(self, sequences: Mapping[str, SequenceBody]) -> list[SequenceOutcome]:
        self.recorder.reset()
        logger.info("Validating device %s serial %s", self.config.device_id, self.config.serial_no)

        async with self.channel:
            context = SessionContext(config=self.config, channel=self.channel, recorder=self.recorder)
            return await SequenceRunner(context).run_all(sequences)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="confseq", description="Run device conformance sequences.")
    parser.add_argument(
        "-c",
        "--config",
        default=VALIDATOR_CONFIG_FILE,
        help="validator configuration file (default: %(default)s)",
    )
    parser.add_argument(
        "-k",
        "--sequence",
        action="append",
        dest="sequences",
        metavar="NAME",
        help="run only the named sequence; repeatable",
    )
    parser.add_argument("--list", action="store_true", help="list available sequences and exit")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> NoReturn:  # pragma: no cover (Entry point wrapper)
    args = _parse_args(argv)
    if args.list:
        for name in SEQUENCES:
            print(name)
        sys.exit(0)

    try:
        config = load_session_config(args.config)
        selected = select_sequences(args.sequences)
    except (StartupConfigError, ValueError) as exc:
        print(f"confseq: {exc}", file=sys.stderr)
        sys.exit(2)

    configure_logging(config)

    try:
        harness = SequenceHarness(config)
        outcomes = asyncio.run(harness.run(selected), loop_factory=uvloop.new_event_loop)
    except KeyboardInterrupt:
        logger.info("Session interrupted by user.")
        sys.exit(1)
    except TransportError as exc:
        logger.critical("Channel unavailable: %s", exc)
        sys.exit(1)
    except RuntimeError as exc:
        logger.critical("Session aborted: %s", exc, exc_info=True)
        sys.exit(1)

    failed = [outcome for outcome in outcomes if outcome.result is Result.FAIL]
    logger.info("%d of %d sequences passed", len(outcomes) - len(failed), len(outcomes))
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()

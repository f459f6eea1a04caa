"""Result log and per-sequence message capture."""

from __future__ import annotations

import logging
import shutil
from enum import StrEnum
from pathlib import Path
from typing import Any

import msgspec

from ..const import (
    ATTRIBUTE_SUFFIX,
    MESSAGE_SUFFIX,
    RESULT_FAIL,
    RESULT_FORMAT,
    RESULT_LOG_FILE,
    RESULT_PASS,
    TESTS_OUT_DIR,
)
from ..errors import SerializationError
from ..protocol.encoding import encode_pretty
from ..protocol.topics import message_base

logger = logging.getLogger("confseq.recorder")


class Result(StrEnum):
    PASS = RESULT_PASS
    FAIL = RESULT_FAIL


class SequenceOutcome(msgspec.Struct, frozen=True):
    """Final verdict for one sequence, written once to the result log."""

    test_name: str
    result: Result
    message: str

    def format(self) -> str:
        return RESULT_FORMAT.format(
            result=self.result.value,
            test_name=self.test_name,
            message=self.message,
        )


class ResultRecorder:
    """Owns ``RESULT.log`` and the ``tests/`` capture tree of one device."""

    def __init__(self, device_out_dir: Path) -> None:
        self.device_out_dir = Path(device_out_dir)
        self.result_log = self.device_out_dir / RESULT_LOG_FILE
        self.tests_out_dir = self.device_out_dir / TESTS_OUT_DIR

    def reset(self) -> None:
        """Start a session: drop previous captures and the previous result log."""
        try:
            self.device_out_dir.mkdir(parents=True, exist_ok=True)
            if self.tests_out_dir.exists():
                shutil.rmtree(self.tests_out_dir)
            self.result_log.unlink(missing_ok=True)
        except OSError as exc:
            raise RuntimeError(f"While preparing {self.device_out_dir.absolute()}") from exc
        logger.info("Writing results to %s", self.result_log.absolute())

    def record(self, result: Result, test_name: str, message: str) -> SequenceOutcome:
        outcome = SequenceOutcome(test_name=test_name, result=Result(result), message=message)
        line = outcome.format()
        logger.info(line.rstrip("\n"))
        try:
            with self.result_log.open("a", encoding="utf-8") as log:
                log.write(line)
        except OSError as exc:
            raise RuntimeError(f"While writing report summary {self.result_log.absolute()}") from exc
        return outcome

    def capture_dir(self, test_name: str) -> Path:
        return self.tests_out_dir / test_name

    def capture(self, test_name: str, payload: dict[str, Any], attributes: dict[str, str]) -> None:
        """Archive a raw inbound message as ``<subFolder>_<subType>.{attr,json}``."""
        base = message_base(attributes)
        out_dir = self.capture_dir(test_name)
        attribute_file = out_dir / f"{base}{ATTRIBUTE_SUFFIX}"
        message_file = out_dir / f"{base}{MESSAGE_SUFFIX}"
        if attribute_file.resolve().parent != out_dir.resolve():
            raise SerializationError(f"Capture name {base!r} escapes {out_dir.absolute()}")
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
            attribute_file.write_bytes(encode_pretty(attributes))
        except (OSError, TypeError) as exc:
            raise RuntimeError(f"While writing attributes to {attribute_file.absolute()}") from exc
        try:
            message_file.write_bytes(encode_pretty(payload))
        except (OSError, TypeError) as exc:
            raise RuntimeError(f"While writing message to {message_file.absolute()}") from exc


__all__ = ["Result", "ResultRecorder", "SequenceOutcome"]

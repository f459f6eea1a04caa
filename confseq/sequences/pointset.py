"""Sequences exercising the pointset block."""

from __future__ import annotations

import secrets

from ..protocol.structures import PointsetConfig
from ..services.sequence import SequenceTest
from .registry import sequence


@sequence
async def pointset_etag(test: SequenceTest) -> None:
    etag = secrets.token_hex(4)
    test.config.pointset = PointsetConfig(etag=etag)
    await test.update_config()

    def converged() -> bool:
        pointset = test.state.pointset
        return test.valid_serial_no() and pointset is not None and pointset.etag == etag

    await test.until_true(converged, f"pointset etag {etag}")

"""Registry of named sequences."""

from __future__ import annotations

from collections.abc import Iterable

from ..services.sequence import SequenceBody

SEQUENCES: dict[str, SequenceBody] = {}


def sequence(body: SequenceBody) -> SequenceBody:
    """Register ``body`` under its function name."""
    name = body.__name__
    if name in SEQUENCES and SEQUENCES[name] is not body:
        raise ValueError(f"Duplicate sequence name {name}")
    SEQUENCES[name] = body
    return body


def select_sequences(names: Iterable[str] | None = None) -> dict[str, SequenceBody]:
    """Pick sequences by name, in the order given; all of them when ``names`` is empty."""
    wanted = list(names or ())
    if not wanted:
        return dict(SEQUENCES)
    unknown = [name for name in wanted if name not in SEQUENCES]
    if unknown:
        raise ValueError(f"Unknown sequence(s): {', '.join(unknown)}")
    return {name: SEQUENCES[name] for name in wanted}


__all__ = ["SEQUENCES", "select_sequences", "sequence"]

"""Error taxonomy for conformance sequences.

Every error below aborts the current sequence only, except
:class:`StartupConfigError` which aborts the session before any sequence runs.
"""

from __future__ import annotations


class ConformanceError(RuntimeError):
    """Base class for failures surfaced through the result log."""


class StartupConfigError(ConformanceError):
    """Session identity or registry configuration is missing or invalid."""


class TransportError(ConformanceError):
    """Publishing failed or the channel went inactive during a wait."""


class SerializationError(ConformanceError):
    """A payload could not be converted to or from its typed form."""


class IdentityViolation(ConformanceError):
    """The device reported a different serial number after it was latched."""


class SequenceTimeout(ConformanceError):
    """The per-sequence deadline expired."""


__all__ = [
    "ConformanceError",
    "IdentityViolation",
    "SequenceTimeout",
    "SerializationError",
    "StartupConfigError",
    "TransportError",
]

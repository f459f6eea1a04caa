"""Per-sequence mirrors and the process-wide session context."""

from .context import SessionContext
from .latch import SerialLatch
from .mirror import CONFIG_BLOCKS, STATE_FOLDERS, BlockSpec, ConfigMirror, StateMirror

__all__ = [
    "BlockSpec",
    "CONFIG_BLOCKS",
    "ConfigMirror",
    "STATE_FOLDERS",
    "SerialLatch",
    "SessionContext",
    "StateMirror",
]

"""Built-in sequences; importing this package registers them."""

from . import pointset, system  # noqa: F401  # pyright: ignore[reportUnusedImport]
from .registry import SEQUENCES, select_sequences, sequence

__all__ = ["SEQUENCES", "select_sequences", "sequence"]

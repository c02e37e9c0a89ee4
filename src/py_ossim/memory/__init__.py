"""Memory subsystem — fixed-partition physical memory.

Re-exports public symbols so callers can write::

    from py_ossim.memory import MemoryManager, OutOfMemoryError
"""

from py_ossim.memory.manager import (
    DEFAULT_PARTITION_SIZES,
    MemoryManager,
    OutOfMemoryError,
    Partition,
)

__all__ = [
    "DEFAULT_PARTITION_SIZES",
    "MemoryManager",
    "OutOfMemoryError",
    "Partition",
]

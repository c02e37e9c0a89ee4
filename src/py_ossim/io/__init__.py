"""I/O subsystem — interrupt vectors and ISR dispatch.

Re-exports public symbols so callers can write::

    from py_ossim.io import InterruptTable, interrupt_prologue
"""

from py_ossim.io.interrupts import (
    DEFAULT_INTERRUPT_OVERHEAD,
    VECTOR_EXEC,
    VECTOR_FORK,
    InterruptTable,
    interrupt_prologue,
    vector_address,
)

__all__ = [
    "DEFAULT_INTERRUPT_OVERHEAD",
    "VECTOR_EXEC",
    "VECTOR_FORK",
    "InterruptTable",
    "interrupt_prologue",
    "vector_address",
]

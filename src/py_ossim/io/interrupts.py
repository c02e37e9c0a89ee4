"""Interrupt vectors and the interrupt prologue.

When a device or a system call needs the kernel, the CPU goes through
the same fixed ritual every time before any handler code runs:

1. **Interrupt occurs** — the CPU switches to kernel mode and saves the
   running process's context.  This costs a fixed overhead.
2. **Vector fetch** — the CPU finds the vector's slot in the interrupt
   vector table and loads the handler (ISR) address into the PC.

Only after that does the ISR itself run.  Its cost depends on the
device, so it is looked up in the **ISR delay table**, indexed by the
same vector number as the vector table.

Well-known vectors by convention:
    - ``VECTOR_FORK`` (2) — the fork system call.
    - ``VECTOR_EXEC`` (3) — the exec system call.
"""

from __future__ import annotations

from dataclasses import dataclass

from py_ossim.records import ExecutionEntry

VECTOR_FORK = 2
VECTOR_EXEC = 3

DEFAULT_INTERRUPT_OVERHEAD = 10
DEFAULT_VECTOR_BASE = 0
DEFAULT_VECTOR_SIZE = 2

_VECTOR_FETCH_TIME = 1


@dataclass(frozen=True)
class InterruptTable:
    """The interrupt vector table paired with the ISR delay table.

    Attributes:
        vectors: Handler address per vector, e.g. ``"0X01E3"``.
        delays: ISR service time per vector/device.

    """

    vectors: tuple[str, ...]
    delays: tuple[int, ...]

    def _check(self, vector: int, table: tuple[object, ...], name: str) -> None:
        if not 0 <= vector < len(table):
            msg = f"Vector {vector} not in {name} table (size {len(table)})"
            raise KeyError(msg)

    def address(self, vector: int) -> str:
        """Return the ISR address stored for a vector.

        Raises:
            KeyError: If the vector is outside the table.

        """
        self._check(vector, self.vectors, "vector")
        return self.vectors[vector]

    def delay(self, vector: int) -> int:
        """Return the ISR service time for a vector.

        Raises:
            KeyError: If the vector is outside the delay table.

        """
        self._check(vector, self.delays, "delay")
        return self.delays[vector]


def vector_address(
    vector: int,
    *,
    base: int = DEFAULT_VECTOR_BASE,
    size: int = DEFAULT_VECTOR_SIZE,
) -> str:
    """Return the memory position of a vector's slot, e.g. ``0x0004``."""
    return f"0x{base + vector * size:04X}"


def interrupt_prologue(
    time: int,
    vector: int,
    table: InterruptTable,
    *,
    overhead: int = DEFAULT_INTERRUPT_OVERHEAD,
    vector_base: int = DEFAULT_VECTOR_BASE,
    vector_size: int = DEFAULT_VECTOR_SIZE,
) -> tuple[list[ExecutionEntry], int]:
    """Generate the two fixed steps every interrupt starts with.

    Args:
        time: Clock value when the interrupt is raised.
        vector: The vector (device or syscall) number.
        table: Where to look up the handler address.
        overhead: Cost of entering kernel mode and saving context.
        vector_base: Memory address of vector 0.
        vector_size: Bytes per vector slot.

    Returns:
        The two log entries and the clock value after the vector fetch.

    """
    entries = [
        ExecutionEntry(time, overhead, "interrupt occurs, switch to kernel mode and save context"),
    ]
    time += overhead
    position = vector_address(vector, base=vector_base, size=vector_size)
    entries.append(
        ExecutionEntry(
            time,
            _VECTOR_FETCH_TIME,
            f"find vector {vector} in memory position {position}, "
            f"load address {table.address(vector)} into the PC",
        )
    )
    time += _VECTOR_FETCH_TIME
    return entries, time

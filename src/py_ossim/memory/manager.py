"""Memory manager — fixed-partition physical memory.

The simulated machine divides user memory into a handful of
**fixed partitions** set up at boot.  A program is loaded into exactly
one partition, and a partition holds at most one program.

Allocation walks the partitions from the last (smallest) to the first
(largest) and takes the first free one big enough for the program.
Nothing is split or merged, so a 1 Mb program can end up alone in a
40 Mb partition once the small ones are taken — the internal
fragmentation fixed partitioning is known for.

Partitions are numbered from 1.  Each one remembers which PID owns it,
so releasing memory on behalf of a process that merely *mirrors* a
partition number (a freshly forked child) leaves the owner's program
in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_PARTITION_SIZES: tuple[int, ...] = (40, 25, 15, 10, 8, 2)

EMPTY = "empty"
UNBOUND = -1


class OutOfMemoryError(Exception):
    """Raise when no free partition can hold a program."""


@dataclass
class Partition:
    """One fixed slice of physical memory.

    Attributes:
        number: 1-based partition number.
        size: Capacity in Mb.
        code: Name of the program loaded here, or ``"empty"``.
        owner: PID of the process holding the partition, if any.

    """

    number: int
    size: int
    code: str = EMPTY
    owner: int | None = None

    @property
    def is_free(self) -> bool:
        """Return True if no program occupies the partition."""
        return self.owner is None


class MemoryManager:
    """Hand out and reclaim fixed partitions."""

    def __init__(self, *, partition_sizes: Sequence[int] = DEFAULT_PARTITION_SIZES) -> None:
        """Create a memory manager with the given partition layout.

        Args:
            partition_sizes: Capacity of each partition, in partition
                number order (partition 1 first).

        """
        self._partitions = [
            Partition(number=i, size=size) for i, size in enumerate(partition_sizes, start=1)
        ]

    @property
    def partitions(self) -> list[Partition]:
        """Return the partition table (live objects, partition 1 first)."""
        return list(self._partitions)

    @property
    def free_partitions(self) -> int:
        """Return how many partitions are unoccupied."""
        return sum(1 for p in self._partitions if p.is_free)

    def partition(self, number: int) -> Partition:
        """Return a partition by its 1-based number.

        Raises:
            KeyError: If no such partition exists.

        """
        if not 1 <= number <= len(self._partitions):
            msg = f"Partition {number} does not exist"
            raise KeyError(msg)
        return self._partitions[number - 1]

    def allocate(self, *, pid: int, program: str, size: int) -> int:
        """Load a program into the first free partition that fits, searching from the last.

        Args:
            pid: The process that will own the partition.
            program: Name recorded in the partition's code field.
            size: Program size in Mb.

        Returns:
            The number of the partition now holding the program.

        Raises:
            OutOfMemoryError: If no free partition is large enough.

        """
        for part in reversed(self._partitions):
            if part.is_free and part.size >= size:
                part.code = program
                part.owner = pid
                return part.number
        msg = f"No free partition can hold {program} ({size} Mb) for PID {pid}"
        raise OutOfMemoryError(msg)

    def free(self, *, pid: int, number: int) -> bool:
        """Release a partition if ``pid`` owns it.

        Freeing an unknown partition number, or one owned by somebody
        else, is a no-op.

        Returns:
            True if the partition was actually released.

        """
        if not 1 <= number <= len(self._partitions):
            return False
        part = self._partitions[number - 1]
        if part.owner != pid:
            return False
        part.code = EMPTY
        part.owner = None
        return True

"""Process Control Blocks and the operations that create and reshape them.

A PCB is the kernel's record of one process: who it is (PID), who made
it (parent PID), what it is running (program name and size), and where
that program lives in memory (partition number).

The two process-creation system calls treat PCBs very differently:

- **fork** makes a *new* PCB — a fresh PID and a snapshot copy of the
  parent's program, size and partition number.  The copy is
  independent; later changes to either side don't leak across.
- **exec** rewrites the *existing* PCB in place — same PID, new program.
  The old program's memory is released before the new one is loaded.

That asymmetry (fork creates identity, exec keeps it) is what makes
``fork(); exec()`` the Unix way to start a new program.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING

from py_ossim.memory.manager import UNBOUND, OutOfMemoryError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from py_ossim.logging import Logger
    from py_ossim.memory.manager import MemoryManager

INIT_PID = 0
NO_PARENT = -1

_TABLE_WIDTH = 58


class ProcessState(StrEnum):
    """How a PCB appears in a status snapshot."""

    RUNNING = "running"
    WAITING = "waiting"


@dataclass
class PCB:
    """A simulated Process Control Block.

    Attributes:
        pid: Unique process identifier, never reused within a run.
        parent_pid: PID of the forking process (-1 for init).
        program_name: Name of the program currently loaded.
        size: Program size in Mb.
        partition_number: Memory partition holding the program,
            or -1 while no memory is bound.

    """

    pid: int
    parent_pid: int
    program_name: str
    size: int
    partition_number: int = UNBOUND

    @property
    def has_memory(self) -> bool:
        """Return True if a partition is bound to this record."""
        return self.partition_number != UNBOUND

    def copy(self) -> PCB:
        """Return an independent copy of this record."""
        return replace(self)


def _row(*cells: object) -> str:
    pid, name, partition, size, state = cells
    return f"| {pid!s:>3} | {name!s:>12} | {partition!s:>16} | {size!s:>4} | {state!s:>7} |"


def render_pcb_table(current: PCB, waiting: Iterable[PCB]) -> str:
    """Render the running record and the wait queue as a boxed table.

    Args:
        current: The record currently running.
        waiting: Records blocked on a child, in insertion order.

    Returns:
        The table text, ending with a newline.

    """
    border = "+" + "-" * (_TABLE_WIDTH - 2) + "+"
    lines = [
        border,
        _row("PID", "program name", "partition number", "size", "state"),
        border,
        _row(
            current.pid,
            current.program_name,
            current.partition_number,
            current.size,
            ProcessState.RUNNING,
        ),
    ]
    lines.extend(
        _row(p.pid, p.program_name, p.partition_number, p.size, ProcessState.WAITING)
        for p in waiting
    )
    lines.append(border)
    return "\n".join(lines) + "\n"


class PcbManager:
    """Create, clone, replace, and tear down PCBs.

    The manager couples PCB changes with the memory manager so a record's
    partition number always reflects what memory it really holds.
    Allocation failures are reported to the operator log, never raised:
    the simulation carries on with an unbound record.
    """

    def __init__(self, *, memory: MemoryManager, logger: Logger) -> None:
        """Create a PCB manager.

        Args:
            memory: Where partitions are allocated and freed.
            logger: Operator log for allocation failures.

        """
        self._memory = memory
        self._logger = logger

    @property
    def memory(self) -> MemoryManager:
        """Return the memory manager backing this PCB manager."""
        return self._memory

    def create_init(self, *, program_name: str = "init", size: int = 1) -> PCB:
        """Create the root record (PID 0, no parent) and bind its memory."""
        record = PCB(
            pid=INIT_PID,
            parent_pid=NO_PARENT,
            program_name=program_name,
            size=size,
        )
        self.allocate(record, time=0)
        return record

    def allocate(self, record: PCB, *, time: int | None = None) -> bool:
        """Bind a partition to a record.

        Returns:
            True on success; False (after logging) if no partition fits.

        """
        try:
            record.partition_number = self._memory.allocate(
                pid=record.pid,
                program=record.program_name,
                size=record.size,
            )
        except OutOfMemoryError:
            record.partition_number = UNBOUND
            self._logger.error(
                f"Memory allocation failed for {record.program_name}",
                source="memory",
                time=time,
            )
            return False
        return True

    def clone_for_fork(self, parent: PCB, new_pid: int) -> PCB:
        """Create the child record for a fork.

        The child mirrors the parent's program, size and partition
        number but is a separate object with its own PID.
        """
        return PCB(
            pid=new_pid,
            parent_pid=parent.pid,
            program_name=parent.program_name,
            size=parent.size,
            partition_number=parent.partition_number,
        )

    def replace_for_exec(
        self,
        record: PCB,
        new_program: str,
        new_size: int,
        *,
        time: int | None = None,
    ) -> bool:
        """Replace a record's program in place.

        The PID and parent PID are kept.  The old program's memory is
        released first, then a partition for the new one is requested.

        Returns:
            True if the new program got a partition.

        """
        self.release(record)
        record.program_name = new_program
        record.size = new_size
        return self.allocate(record, time=time)

    def release(self, record: PCB) -> None:
        """Release a record's memory binding.

        Safe to call on a record that holds no memory.  A partition that
        the record only mirrors (a fork child's inherited number) is left
        to its owner.
        """
        if not record.has_memory:
            return
        self._memory.free(pid=record.pid, number=record.partition_number)
        record.partition_number = UNBOUND

    def snapshot(self, record: PCB, waiting: Iterable[PCB]) -> str:
        """Render the record and the wait queue for the status log."""
        return render_pcb_table(record, waiting)

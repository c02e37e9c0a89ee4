"""Log records produced by a simulation run.

Two streams come out of the simulator:

- The **execution log** — one ``ExecutionEntry`` per hardware or kernel
  step, rendered as ``<time>, <duration>, <description>``.
- The **status log** — one ``StatusSnapshot`` per ``FORK``/``EXEC``,
  a picture of the process table at that instant.

Both are frozen dataclasses: once the simulated machine has done
something, the record of it never changes.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExecutionEntry:
    """One timestamped step of the simulated machine."""

    time: int
    duration: int
    description: str

    @property
    def end(self) -> int:
        """Return the clock value when this step finished."""
        return self.time + self.duration

    def __str__(self) -> str:
        """Format as ``time, duration, description``."""
        return f"{self.time}, {self.duration}, {self.description}"


@dataclass(frozen=True)
class StatusSnapshot:
    """The process table as it looked right after a FORK or EXEC.

    Attributes:
        time: Simulated time the snapshot was taken.
        event: The trace line that triggered it (e.g. ``FORK, 10``).
        table: The rendered PCB table.

    """

    time: int
    event: str
    table: str

    def __str__(self) -> str:
        """Format as a header line followed by the table."""
        return f"time: {self.time}; current trace: {self.event}\n{self.table}"

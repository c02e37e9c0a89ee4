"""The trace interpreter — how the simulated kernel services a trace.

The simulator walks one process's trace line by line and, for each
activity, emits the steps the hardware and kernel would take:

- ``CPU d`` — the process simply runs for ``d`` units.
- ``SYSCALL v`` / ``END_IO v`` — interrupt prologue for vector ``v``,
  the ISR (its cost comes from the delay table), then ``IRET``.
- ``FORK d`` — a trap through the fork vector clones the PCB, the parent
  blocks in the wait queue, and the **child's section of the trace runs
  to completion first**.  The parent's clock resumes at the time the
  child finished.
- ``EXEC p, d`` — a trap through the exec vector loads program ``p``
  into the *same* PCB and runs ``p``'s trace in place of the rest of
  the current one.  Exec never returns: whatever followed it in the
  invoking trace is discarded.

Recursion models the process tree.  A fork recurses into the child's
sub-trace with a fresh, empty wait queue; an exec recurses into the new
program's trace with the same PCB and the same wait queue, then stops.

Everything here is single-threaded and runs in logical time only.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from itertools import count
from typing import TYPE_CHECKING

from py_ossim.config import SimulatorConfig
from py_ossim.io.interrupts import interrupt_prologue
from py_ossim.loader import ProgramLoadError
from py_ossim.logging import Logger
from py_ossim.memory.manager import MemoryManager
from py_ossim.process.pcb import PCB, PcbManager
from py_ossim.records import ExecutionEntry, StatusSnapshot
from py_ossim.trace import Activity, TraceLine, parse_trace

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from py_ossim.io.interrupts import InterruptTable
    from py_ossim.loader import ProgramLoader


@dataclass
class SimulationResult:
    """The logs one interpreter call produced and the time it reached."""

    time: int
    execution: list[ExecutionEntry] = field(default_factory=lambda: list[ExecutionEntry]())
    status: list[StatusSnapshot] = field(default_factory=lambda: list[StatusSnapshot]())

    @property
    def execution_text(self) -> str:
        """Return the execution log, one ``time, duration, description`` per line."""
        return "".join(f"{entry}\n" for entry in self.execution)

    @property
    def status_text(self) -> str:
        """Return every status snapshot, in the order they were taken."""
        return "".join(str(snapshot) for snapshot in self.status)

    def record(self, duration: int, description: str) -> None:
        """Log a step at the current time and advance the clock past it."""
        self.execution.append(ExecutionEntry(self.time, duration, description))
        self.time += duration

    def extend(self, entries: Iterable[ExecutionEntry], time: int) -> None:
        """Append pre-built entries and jump the clock to ``time``."""
        self.execution.extend(entries)
        self.time = time

    def snapshot(self, event: str, table: str) -> None:
        """Take a status snapshot at the current time."""
        self.status.append(StatusSnapshot(time=self.time, event=event, table=table))

    def merge(self, other: SimulationResult) -> None:
        """Splice a nested call's logs in and adopt its finishing time."""
        self.execution.extend(other.execution)
        self.status.extend(other.status)
        self.time = other.time


@dataclass(frozen=True)
class ChildBranch:
    """The outcome of scanning a trace after a FORK.

    Attributes:
        lines: The lines only the child runs.
        resume_index: Where the parent's own walk continues.

    """

    lines: tuple[TraceLine, ...]
    resume_index: int


def extract_child_branch(trace: Sequence[TraceLine], fork_index: int) -> ChildBranch:
    """Split the lines after a FORK into the child's part and the parent's resume point.

    Branch markers form a tiny, flat grammar (no nesting):

    - ``IF_CHILD`` starts the child's lines.
    - ``ENDIF`` ends them.
    - ``IF_PARENT`` marks where the parent picks up.  The scan keeps
      going past it, since a later ``IF_CHILD`` section may hold more
      child lines, unless the child has already exec'd.
    - An ``EXEC`` inside the child's lines is kept and ends the child's
      collection; everything after it belongs to the exec'd program.

    Args:
        trace: The full trace containing the FORK.
        fork_index: Position of the FORK line.

    Returns:
        The child's lines and the index after the last ``IF_PARENT``
        seen (``len(trace)`` if there was none).

    """
    child: list[TraceLine] = []
    in_child_branch = False
    child_did_exec = False
    resume_index = len(trace)

    for j in range(fork_index + 1, len(trace)):
        line = trace[j]
        activity = line.activity
        if activity is Activity.IF_CHILD and not in_child_branch:
            in_child_branch = True
        elif activity is Activity.ENDIF and in_child_branch:
            in_child_branch = False
        elif activity is Activity.IF_PARENT:
            resume_index = j + 1
            in_child_branch = False
            if child_did_exec:
                break
        elif in_child_branch:
            child.append(line)
            if activity is Activity.EXEC:
                child_did_exec = True
                in_child_branch = False

    return ChildBranch(lines=tuple(child), resume_index=resume_index)


class Simulator:
    """Drive a simulation run over one machine.

    The simulator owns everything that is process-wide for a run: the
    PID counter, the random source for bookkeeping costs, the memory
    manager, and the operator log.  Every recursive interpreter call
    goes through the same instance, so PIDs stay unique and partitions
    stay consistent across the whole process tree.
    """

    def __init__(
        self,
        *,
        table: InterruptTable,
        loader: ProgramLoader,
        config: SimulatorConfig | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a simulator.

        Args:
            table: Interrupt vector and ISR delay tables.
            loader: Program sizes and traces for EXEC.
            config: Machine constants (defaults to ``SimulatorConfig()``).
            logger: Operator log (a fresh one if omitted).

        """
        self._config = config if config is not None else SimulatorConfig()
        self._table = table
        self._loader = loader
        self._logger = logger if logger is not None else Logger()
        self._memory = MemoryManager(partition_sizes=self._config.partitions)
        self._pcbs = PcbManager(memory=self._memory, logger=self._logger)
        self._rng = random.Random(self._config.seed)  # noqa: S311
        self._pids = count(start=1)

    @property
    def config(self) -> SimulatorConfig:
        """Return the machine configuration."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the operator log."""
        return self._logger

    @property
    def memory(self) -> MemoryManager:
        """Return the memory manager."""
        return self._memory

    @property
    def pcb_manager(self) -> PcbManager:
        """Return the PCB manager."""
        return self._pcbs

    def boot(self) -> PCB:
        """Create the init process (PID 0) and load it into memory."""
        init = self._pcbs.create_init(
            program_name=self._config.init_program,
            size=self._config.init_size,
        )
        self._logger.info(
            f"Booted {init.program_name} as PID {init.pid} in partition {init.partition_number}",
            source="kernel",
            time=0,
        )
        return init

    def run(
        self,
        lines: Iterable[str],
        *,
        start_time: int = 0,
        init: PCB | None = None,
    ) -> SimulationResult:
        """Parse a raw trace and simulate it as the root process.

        Args:
            lines: Raw trace lines.
            start_time: Clock value to start from.
            init: Root record to run as; booted fresh if omitted.

        Returns:
            Everything the run logged and the final time.

        """
        trace = parse_trace(lines)
        root = init if init is not None else self.boot()
        return self.simulate(trace, start_time, root, [])

    def simulate(
        self,
        trace: Sequence[TraceLine],
        time: int,
        current: PCB,
        wait_queue: list[PCB],
    ) -> SimulationResult:
        """Simulate one trace for one process.

        Args:
            trace: Parsed trace lines for this process.
            time: Clock value to start from.
            current: The record of the process running the trace.
            wait_queue: Processes blocked while this one runs.

        Returns:
            The logs this call (and its nested calls) produced, and the
            time the trace finished.

        """
        result = SimulationResult(time=time)
        index = 0
        while index < len(trace):
            line = trace[index]
            match line.activity:
                case Activity.CPU:
                    result.record(line.value, "CPU Burst")
                case Activity.SYSCALL:
                    self._service_interrupt(result, line.value, "SYSCALL ISR")
                case Activity.END_IO:
                    self._service_interrupt(result, line.value, "ENDIO ISR")
                case Activity.FORK:
                    index = self._fork(trace, index, result, current, wait_queue)
                    continue
                case Activity.EXEC:
                    self._exec(line, result, current, wait_queue)
                    break
                case _:
                    pass  # branch markers only matter to extract_child_branch
            index += 1
        return result

    def _prologue(self, result: SimulationResult, vector: int) -> None:
        entries, time = interrupt_prologue(
            result.time,
            vector,
            self._table,
            overhead=self._config.interrupt_overhead,
            vector_base=self._config.vector_base,
            vector_size=self._config.vector_size,
        )
        result.extend(entries, time)

    def _service_interrupt(self, result: SimulationResult, vector: int, description: str) -> None:
        self._prologue(result, vector)
        result.record(self._table.delay(vector), description)
        result.record(1, "IRET")

    def _bookkeeping_cost(self) -> int:
        low, high = self._config.bookkeeping_range
        return self._rng.randint(low, high)

    def _fork(
        self,
        trace: Sequence[TraceLine],
        index: int,
        result: SimulationResult,
        current: PCB,
        wait_queue: list[PCB],
    ) -> int:
        """Service a FORK and run the child; return where the parent resumes."""
        line = trace[index]
        self._prologue(result, self._config.fork_vector)
        result.record(line.value, "cloning the PCB")
        result.record(0, "scheduler called")
        result.record(1, "IRET")

        child = self._pcbs.clone_for_fork(current, next(self._pids))
        wait_queue.append(current.copy())
        result.snapshot(str(line), self._pcbs.snapshot(child, wait_queue))
        self._logger.info(
            f"PID {current.pid} forked PID {child.pid}",
            source="kernel",
            time=result.time,
        )

        branch = extract_child_branch(trace, index)
        result.merge(self.simulate(branch.lines, result.time, child, []))

        self._pcbs.release(child)
        self._logger.info(f"PID {child.pid} exited", source="kernel", time=result.time)
        return branch.resume_index

    def _exec(
        self,
        line: TraceLine,
        result: SimulationResult,
        current: PCB,
        wait_queue: list[PCB],
    ) -> None:
        """Service an EXEC and run the new program in place of the caller's trace."""
        program = line.program
        assert program is not None  # guaranteed by parse_trace_line  # noqa: S101
        self._prologue(result, self._config.exec_vector)

        try:
            size = self._loader.size_of(program)
        except ProgramLoadError as e:
            self._logger.error(str(e), source="loader", time=result.time)
            return

        result.record(line.value, f"Program is {size} Mb large")
        result.record(size * self._config.load_time_per_mb, "loading program into memory")
        self._pcbs.replace_for_exec(current, program, size, time=result.time)
        result.record(self._bookkeeping_cost(), "marking partition as occupied")
        result.record(self._bookkeeping_cost(), "updating PCB")
        result.record(0, "scheduler called")
        result.record(1, "IRET")
        result.snapshot(str(line), self._pcbs.snapshot(current, wait_queue))
        self._logger.info(
            f"PID {current.pid} now running {program} in partition {current.partition_number}",
            source="kernel",
            time=result.time,
        )

        try:
            program_trace = parse_trace(self._loader.read_trace(program))
        except ProgramLoadError as e:
            self._logger.error(str(e), source="loader", time=result.time)
            return

        result.merge(self.simulate(program_trace, result.time, current, wait_queue))

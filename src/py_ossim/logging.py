"""Operator log — the simulator's console of warnings and errors.

The execution log and status log describe what the *simulated* machine
did.  The operator log is different: it records what went wrong (or
noteworthy) while running the simulation itself, the way a kernel's
``dmesg`` buffer records driver errors next to the work it did.

- **LogLevel** — severities, lowest first, so ``>=`` selects "this bad or worse".
- **LogEntry** — one immutable record stamped with the simulated time.
- **Logger** — an append-only log, filterable by severity and source.

Failures such as a program that does not fit in memory, or an ``EXEC``
of a program whose trace cannot be opened, are not fatal.  They land
here and the simulation carries on.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """How serious an operator log entry is."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One operator log record.

    Attributes:
        level: Severity.
        message: What happened, e.g. ``Could not open program1.txt``.
        source: Subsystem that reported it: ``kernel``, ``memory`` or ``loader``.
        time: Simulated clock value when it happened, if known.

    """

    level: LogLevel
    message: str
    source: str
    time: int | None = None

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message`` with an optional time prefix."""
        text = f"[{self.level.name}] {self.source}: {self.message}"
        if self.time is None:
            return text
        return f"{self.time:>6} {text}"


class Logger:
    """Collects operator log entries for one simulation run.

    One logger is shared by every recursive interpreter call of a
    run, so entries appear in the order events happened.
    """

    def __init__(self) -> None:
        """Create an empty logger."""
        self._entries: list[LogEntry] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of every entry, oldest first."""
        return list(self._entries)

    @property
    def errors(self) -> list[LogEntry]:
        """Return only the ERROR entries."""
        return self.filter(min_level=LogLevel.ERROR)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        time: int | None = None,
    ) -> None:
        """Record one event.

        Args:
            level: Severity of the event.
            message: What happened.
            source: Subsystem reporting it.
            time: Simulated time of the event.

        """
        self._entries.append(LogEntry(level=level, message=message, source=source, time=time))

    def info(self, message: str, *, source: str, time: int | None = None) -> None:
        """Record an INFO entry."""
        self.log(LogLevel.INFO, message, source=source, time=time)

    def error(self, message: str, *, source: str, time: int | None = None) -> None:
        """Record an ERROR entry."""
        self.log(LogLevel.ERROR, message, source=source, time=time)

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return the entries at or above ``min_level`` from ``source``.

        Either criterion may be omitted; with neither, this is a copy of
        the whole log.
        """
        return [
            entry
            for entry in self._entries
            if (min_level is None or entry.level >= min_level)
            and (source is None or entry.source == source)
        ]

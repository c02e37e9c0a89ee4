"""Trace lines — the input language of the simulator.

A trace is a program reduced to the events the kernel cares about.
Each line is either a timed **activity** or a **branch marker**::

    CPU, 50               run on the CPU for 50 time units
    SYSCALL, 4            trap into the kernel through vector 4
    END_IO, 4             device 4 signals that its I/O finished
    FORK, 10              clone this process (10 units to copy the PCB)
    EXEC program1, 50     replace this program with program1
    IF_CHILD, 0           following lines run only in the child
    IF_PARENT, 0          following lines run only in the parent
    ENDIF, 0              end of the conditional section

Fields are separated by commas and/or whitespace, so ``EXEC, program1, 50``
and ``EXEC program1, 50`` mean the same thing.  Markers may carry a
dummy number or none at all.

Input is assumed to be well formed; anything else raises
``TraceSyntaxError`` and stops the run.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

_FIELD_SEPARATOR = re.compile(r"[,\s]+")


class TraceSyntaxError(ValueError):
    """Raise when a trace line does not follow the trace grammar."""


class Activity(StrEnum):
    """Every kind of line a trace may contain."""

    CPU = "CPU"
    SYSCALL = "SYSCALL"
    END_IO = "END_IO"
    FORK = "FORK"
    EXEC = "EXEC"
    IF_CHILD = "IF_CHILD"
    IF_PARENT = "IF_PARENT"
    ENDIF = "ENDIF"

    @property
    def is_marker(self) -> bool:
        """Return True for the branch markers that only delimit fork sections."""
        return self in _MARKERS


_MARKERS = frozenset({Activity.IF_CHILD, Activity.IF_PARENT, Activity.ENDIF})


@dataclass(frozen=True)
class TraceLine:
    """One decoded trace record.

    Attributes:
        activity: What kind of line this is.
        value: The numeric argument — burst length, vector number,
            or fork/exec cost depending on ``activity``.  Zero for markers.
        program: Target program name; only set for ``EXEC``.

    """

    activity: Activity
    value: int = 0
    program: str | None = None

    def __str__(self) -> str:
        """Render the line the way it appears in status snapshots."""
        if self.activity is Activity.EXEC:
            return f"EXEC {self.program}, {self.value}"
        if self.activity.is_marker:
            return str(self.activity)
        return f"{self.activity}, {self.value}"


def _to_int(token: str, line: str) -> int:
    try:
        return int(token)
    except ValueError:
        msg = f"Expected an integer, got {token!r} in trace line {line!r}"
        raise TraceSyntaxError(msg) from None


def parse_trace_line(line: str) -> TraceLine:
    """Decode one raw trace record.

    Args:
        line: The raw text, e.g. ``"EXEC program1, 50"``.

    Returns:
        The decoded TraceLine.

    Raises:
        TraceSyntaxError: If the activity is unknown or an argument is
            missing or not an integer.

    """
    fields = [f for f in _FIELD_SEPARATOR.split(line.strip()) if f]
    if not fields:
        msg = "Empty trace line"
        raise TraceSyntaxError(msg)

    try:
        activity = Activity(fields[0].upper())
    except ValueError:
        msg = f"Unknown activity {fields[0]!r} in trace line {line!r}"
        raise TraceSyntaxError(msg) from None

    if activity.is_marker:
        return TraceLine(activity=activity)

    if activity is Activity.EXEC:
        if len(fields) < 3:  # noqa: PLR2004
            msg = f"EXEC needs a program name and a duration: {line!r}"
            raise TraceSyntaxError(msg)
        return TraceLine(activity=activity, value=_to_int(fields[2], line), program=fields[1])

    if len(fields) < 2:  # noqa: PLR2004
        msg = f"{activity} needs a numeric argument: {line!r}"
        raise TraceSyntaxError(msg)
    return TraceLine(activity=activity, value=_to_int(fields[1], line))


def parse_trace(lines: Iterable[str]) -> list[TraceLine]:
    """Decode a whole trace, skipping blank lines."""
    return [parse_trace_line(line) for line in lines if line.strip()]

"""Program loader — the catalog of programs and where their traces live.

``EXEC`` needs two things about the program it is about to run:

1. Its **size**, from the external program catalog (``external_files``).
   The size decides which memory partition can hold it and how long
   loading takes.
2. Its **trace**, which conventionally sits in a file named
   ``<program-name>.txt``.

Where traces come from is a strategy: ``DirectoryTraceSource`` reads
files next to the main trace, ``InMemoryTraceSource`` serves them from
a dict (used by the web API and by tests).

This module also parses the plain-text tables the simulator is fed:

- vector table — one ISR address per line (``0X01E3``).
- device table — one ISR delay per line (``110``).
- external files — ``<program-name>, <size>`` per line.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

TRACE_SUFFIX = ".txt"

_FIELD_SEPARATOR = re.compile(r"[,\s]+")


class ProgramLoadError(Exception):
    """Raise when a program's size or trace cannot be found."""


def _content_lines(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        stripped = line.strip()
        if stripped:
            yield stripped


def parse_vector_table(lines: Iterable[str]) -> tuple[str, ...]:
    """Parse the interrupt vector table, one address per line."""
    return tuple(_content_lines(lines))


def parse_delay_table(lines: Iterable[str]) -> tuple[int, ...]:
    """Parse the ISR delay (device) table, one integer per line.

    Raises:
        ValueError: If a line is not an integer.

    """
    return tuple(int(line) for line in _content_lines(lines))


class ProgramCatalog:
    """Map program names to their size in Mb."""

    def __init__(self, sizes: Mapping[str, int] | None = None) -> None:
        """Create a catalog, optionally pre-populated (copied, not referenced)."""
        self._sizes: dict[str, int] = dict(sizes) if sizes else {}

    @classmethod
    def parse(cls, lines: Iterable[str]) -> ProgramCatalog:
        """Build a catalog from ``<program-name>, <size>`` lines.

        Raises:
            ValueError: If a line lacks a name or a numeric size.

        """
        sizes: dict[str, int] = {}
        for line in _content_lines(lines):
            fields = [f for f in _FIELD_SEPARATOR.split(line) if f]
            if len(fields) != 2:  # noqa: PLR2004
                msg = f"Expected '<program-name>, <size>', got {line!r}"
                raise ValueError(msg)
            sizes[fields[0]] = int(fields[1])
        return cls(sizes)

    def size_of(self, name: str) -> int:
        """Return a program's size.

        Raises:
            ProgramLoadError: If the program is not in the catalog.

        """
        try:
            return self._sizes[name]
        except KeyError:
            msg = f"Program {name} is not in the external files list"
            raise ProgramLoadError(msg) from None

    def items(self) -> list[tuple[str, int]]:
        """Return all (name, size) pairs."""
        return list(self._sizes.items())

    def __contains__(self, name: object) -> bool:
        """Return True if the program is listed."""
        return name in self._sizes

    def __len__(self) -> int:
        """Return the number of listed programs."""
        return len(self._sizes)

    def describe(self) -> str:
        """Render the catalog for the console."""
        lines = ["List of external files:"]
        lines.extend(f"  {name}: {size} Mb" for name, size in self._sizes.items())
        return "\n".join(lines)


class TraceSource(Protocol):
    """Where program traces come from."""

    def read_trace(self, name: str) -> list[str]:
        """Return the raw lines of a program's trace.

        Raises:
            ProgramLoadError: If no trace exists for the program.

        """
        ...  # pragma: no cover


class DirectoryTraceSource:
    """Read ``<program-name>.txt`` files from a directory."""

    def __init__(self, directory: Path | str = ".") -> None:
        """Create a source rooted at ``directory``."""
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        """Return the directory traces are read from."""
        return self._directory

    def read_trace(self, name: str) -> list[str]:
        """Return the lines of ``<directory>/<name>.txt``."""
        path = self._directory / f"{name}{TRACE_SUFFIX}"
        try:
            return path.read_text().splitlines()
        except OSError as e:
            msg = f"Could not open {name}{TRACE_SUFFIX}"
            raise ProgramLoadError(msg) from e


class InMemoryTraceSource:
    """Serve traces from a dict of program name to lines."""

    def __init__(self, traces: Mapping[str, Iterable[str]] | None = None) -> None:
        """Create a source from already-loaded traces."""
        self._traces: dict[str, list[str]] = {
            name: list(lines) for name, lines in (traces or {}).items()
        }

    def read_trace(self, name: str) -> list[str]:
        """Return the stored lines for ``name``."""
        lines = self._traces.get(name)
        if lines is None:
            msg = f"Could not open {name}{TRACE_SUFFIX}"
            raise ProgramLoadError(msg)
        return list(lines)


class ProgramLoader:
    """Answer the two questions ``EXEC`` asks: how big, and what to run."""

    def __init__(self, catalog: ProgramCatalog, source: TraceSource) -> None:
        """Create a loader.

        Args:
            catalog: Program sizes.
            source: Where program traces are read from.

        """
        self._catalog = catalog
        self._source = source

    @property
    def catalog(self) -> ProgramCatalog:
        """Return the program catalog."""
        return self._catalog

    def size_of(self, name: str) -> int:
        """Return a program's size (see ``ProgramCatalog.size_of``)."""
        return self._catalog.size_of(name)

    def read_trace(self, name: str) -> list[str]:
        """Return the raw trace lines of a program."""
        return self._source.read_trace(name)

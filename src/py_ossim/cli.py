"""Command-line front end.

Runs one simulation from files on disk::

    py-ossim trace.txt vector_table.txt device_table.txt external_files.txt

and writes two files into the output directory:

- ``execution.txt`` — every step of the simulated machine.
- ``system_status.txt`` — the process table at each FORK and EXEC.

Operator warnings and errors (a program that didn't fit in memory, a
missing ``<program>.txt``) are printed to stderr; they never stop the
run.  Unreadable inputs do, with exit status 1.

The helpers (``build_parser``, ``write_output``) are pure or nearly so
and testable; ``main()`` is the I/O entrypoint.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from py_ossim import __version__
from py_ossim.bootloader import Bootloader, BootError
from py_ossim.logging import Logger, LogLevel
from py_ossim.trace import TraceSyntaxError

if TYPE_CHECKING:
    from collections.abc import Sequence

EXECUTION_FILE = "execution.txt"
STATUS_FILE = "system_status.txt"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ``py-ossim``."""
    parser = argparse.ArgumentParser(
        prog="py-ossim",
        description="Simulate how a kernel services a trace of CPU, I/O, fork and exec events.",
    )
    parser.add_argument("trace", type=Path, help="trace of the init process")
    parser.add_argument("vector_table", type=Path, help="ISR address per vector")
    parser.add_argument("device_table", type=Path, help="ISR delay per vector/device")
    parser.add_argument("external_files", type=Path, help="'<program>, <size>' per line")
    parser.add_argument(
        "--programs-dir",
        type=Path,
        default=None,
        help="directory holding <program>.txt traces (default: the trace's directory)",
    )
    parser.add_argument("--config", type=Path, default=None, help="JSON machine image")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path(),
        help="where execution.txt and system_status.txt are written",
    )
    parser.add_argument("--seed", type=int, default=None, help="seed for bookkeeping costs")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def write_output(text: str, path: Path) -> None:
    """Write one log file, creating its directory if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


def main(argv: Sequence[str] | None = None) -> int:
    """Run a simulation from the command line.

    This is the ``py-ossim`` console entry point.

    Returns:
        The process exit status.

    """
    args = build_parser().parse_args(argv)
    logger = Logger()
    programs_dir = args.programs_dir if args.programs_dir is not None else args.trace.parent

    bootloader = Bootloader(
        vector_table=args.vector_table,
        device_table=args.device_table,
        external_files=args.external_files,
        programs_dir=programs_dir,
        config_path=args.config,
        seed=args.seed,
        logger=logger,
    )
    try:
        simulator, init = bootloader.boot()
        trace_lines = args.trace.read_text().splitlines()
    except (BootError, OSError) as e:
        print(f"ERROR! {e}", file=sys.stderr)  # noqa: T201
        return 1

    assert bootloader.catalog is not None  # set by boot()  # noqa: S101
    print(bootloader.catalog.describe())  # noqa: T201

    try:
        result = simulator.run(trace_lines, init=init)
    except (TraceSyntaxError, KeyError) as e:
        print(f"ERROR! {e}", file=sys.stderr)  # noqa: T201
        return 1

    for entry in logger.filter(min_level=LogLevel.WARNING):
        print(f"{entry.level.name}! {entry.message}", file=sys.stderr)  # noqa: T201

    write_output(result.execution_text, args.output_dir / EXECUTION_FILE)
    write_output(result.status_text, args.output_dir / STATUS_FILE)

    print("\nSimulation complete!")  # noqa: T201
    print(f"Check {EXECUTION_FILE} and {STATUS_FILE} for results.")  # noqa: T201
    return 0


if __name__ == "__main__":
    sys.exit(main())

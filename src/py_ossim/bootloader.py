"""Bootloader — assemble a ready-to-run simulator from files on disk.

A simulation run needs four inputs besides the trace itself:

1. The **machine image** (optional JSON) — see ``py_ossim.config``.
2. The **vector table** — ISR address per vector.
3. The **device table** — ISR delay per vector/device.
4. The **external files** list — size of every program EXEC may load.

The bootloader reads them in that order, records a dmesg-style boot
log, and hands back a ``Simulator`` whose init process is loaded into
memory.  Any unreadable or malformed input stops the boot with a
``BootError``: without its tables the machine cannot run at all.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from py_ossim.config import ConfigError, SimulatorConfig, load_config
from py_ossim.io.interrupts import InterruptTable
from py_ossim.kernel import Simulator
from py_ossim.loader import (
    DirectoryTraceSource,
    ProgramCatalog,
    ProgramLoader,
    parse_delay_table,
    parse_vector_table,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from py_ossim.logging import Logger
    from py_ossim.process.pcb import PCB


class BootError(RuntimeError):
    """Raise when the simulator cannot be assembled from its inputs."""


T = TypeVar("T")


def _read_table(path: Path, parse: Callable[[list[str]], T], what: str) -> T:
    try:
        return parse(path.read_text().splitlines())
    except (OSError, ValueError) as e:
        msg = f"Cannot load {what} from {path}: {e}"
        raise BootError(msg) from e


class Bootloader:
    """Read the simulator's inputs and boot it.

    Usage::

        bootloader = Bootloader(
            vector_table=Path("vector_table.txt"),
            device_table=Path("device_table.txt"),
            external_files=Path("external_files.txt"),
        )
        simulator, init = bootloader.boot()

    """

    def __init__(
        self,
        *,
        vector_table: Path,
        device_table: Path,
        external_files: Path,
        programs_dir: Path | None = None,
        config_path: Path | None = None,
        seed: int | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a bootloader.

        Args:
            vector_table: Path to the interrupt vector table.
            device_table: Path to the ISR delay table.
            external_files: Path to the program catalog.
            programs_dir: Where ``<program>.txt`` traces live (default:
                the current directory).
            config_path: Optional JSON machine image.
            seed: Overrides the image's random seed when given.
            logger: Operator log handed to the simulator.

        """
        self._vector_table = vector_table
        self._device_table = device_table
        self._external_files = external_files
        self._programs_dir = programs_dir if programs_dir is not None else Path()
        self._config_path = config_path
        self._seed = seed
        self._logger = logger
        self._boot_log: list[str] = []
        self._catalog: ProgramCatalog | None = None

    @property
    def boot_log(self) -> list[str]:
        """Return the accumulated boot log messages."""
        return list(self._boot_log)

    @property
    def catalog(self) -> ProgramCatalog | None:
        """Return the program catalog, or None before boot."""
        return self._catalog

    def load_config(self) -> SimulatorConfig:
        """Load the machine image, or the defaults if none was given.

        Raises:
            BootError: If the image is unreadable or invalid.

        """
        if self._config_path is None:
            config = SimulatorConfig()
        else:
            try:
                config = load_config(self._config_path)
            except ConfigError as e:
                raise BootError(str(e)) from e
            self._boot_log.append(f"[BOOT] Machine image {self._config_path} ... OK")
        if self._seed is not None:
            config = SimulatorConfig.from_dict({**config.to_dict(), "seed": self._seed})
        return config

    def boot(self) -> tuple[Simulator, PCB]:
        """Read every input, build the simulator and load init.

        Returns:
            The simulator and its init record.

        Raises:
            BootError: If any input is missing or malformed.

        """
        config = self.load_config()

        vectors = _read_table(self._vector_table, parse_vector_table, "vector table")
        self._boot_log.append(f"[BOOT] Vector table: {len(vectors)} vectors ... OK")
        delays = _read_table(self._device_table, parse_delay_table, "device table")
        self._boot_log.append(f"[BOOT] Device table: {len(delays)} devices ... OK")
        catalog = _read_table(self._external_files, ProgramCatalog.parse, "external files")
        self._boot_log.append(f"[BOOT] External files: {len(catalog)} programs ... OK")
        self._catalog = catalog

        simulator = Simulator(
            table=InterruptTable(vectors=vectors, delays=delays),
            loader=ProgramLoader(catalog, DirectoryTraceSource(self._programs_dir)),
            config=config,
            logger=self._logger,
        )
        init = simulator.boot()
        self._boot_log.append(
            f"[BOOT] {init.program_name} loaded in partition {init.partition_number}"
        )
        return simulator, init

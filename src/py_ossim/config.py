"""Machine configuration — the constants a simulation run depends on.

Most of the simulated machine is fixed by convention: the fork trap
uses vector 2, exec uses vector 3, entering an interrupt costs 10
units, and loading a program takes 15 units per Mb.  Those defaults
live in ``SimulatorConfig``.

A run can override any of them with a JSON **machine image**, the same
way a kernel image on disk carries the settings a kernel boots with::

    {
        "interrupt_overhead": 10,
        "partitions": [40, 25, 15, 10, 8, 2],
        "seed": 42
    }

Unknown keys are rejected, so a typo doesn't silently fall back to a
default.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

from py_ossim.io.interrupts import (
    DEFAULT_INTERRUPT_OVERHEAD,
    DEFAULT_VECTOR_BASE,
    DEFAULT_VECTOR_SIZE,
    VECTOR_EXEC,
    VECTOR_FORK,
)
from py_ossim.memory.manager import DEFAULT_PARTITION_SIZES

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_LOAD_TIME_PER_MB = 15
DEFAULT_BOOKKEEPING_RANGE = (1, 10)

_INT_FIELDS = frozenset(
    {
        "interrupt_overhead",
        "fork_vector",
        "exec_vector",
        "load_time_per_mb",
        "vector_base",
        "vector_size",
        "init_size",
    }
)


class ConfigError(RuntimeError):
    """Raise when a machine image cannot be read or is invalid."""


@dataclass(frozen=True)
class SimulatorConfig:
    """Constants of the simulated machine.

    Attributes:
        interrupt_overhead: Cost of switching to kernel mode and saving context.
        fork_vector: Vector the FORK trap goes through.
        exec_vector: Vector the EXEC trap goes through.
        load_time_per_mb: Loading cost per Mb of program.
        bookkeeping_range: Inclusive bounds of the random partition/PCB
            bookkeeping costs during EXEC.
        partitions: Fixed partition sizes, partition 1 first.
        vector_base: Memory address of vector 0.
        vector_size: Bytes per vector table slot.
        init_program: Program name of the root process.
        init_size: Size of the root process's program.
        seed: Seed for the bookkeeping random source (None = OS entropy).

    """

    interrupt_overhead: int = DEFAULT_INTERRUPT_OVERHEAD
    fork_vector: int = VECTOR_FORK
    exec_vector: int = VECTOR_EXEC
    load_time_per_mb: int = DEFAULT_LOAD_TIME_PER_MB
    bookkeeping_range: tuple[int, int] = DEFAULT_BOOKKEEPING_RANGE
    partitions: tuple[int, ...] = DEFAULT_PARTITION_SIZES
    vector_base: int = DEFAULT_VECTOR_BASE
    vector_size: int = DEFAULT_VECTOR_SIZE
    init_program: str = "init"
    init_size: int = 1
    seed: int | None = None

    def __post_init__(self) -> None:
        """Reject settings no machine could run with."""
        low, high = self.bookkeeping_range
        if low < 0 or low > high:
            msg = f"Invalid bookkeeping range {self.bookkeeping_range}"
            raise ConfigError(msg)
        if self.interrupt_overhead < 0 or self.load_time_per_mb < 0:
            msg = "Costs must not be negative"
            raise ConfigError(msg)
        if not self.partitions:
            msg = "At least one memory partition is required"
            raise ConfigError(msg)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimulatorConfig:
        """Build a config from a JSON-style dict, defaults filling the gaps.

        Raises:
            ConfigError: If a key is unknown or a value has the wrong shape.

        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"Unknown config keys: {', '.join(unknown)}"
            raise ConfigError(msg)

        for key, value in data.items():
            # bool is an int subclass but never a valid cost or address.
            is_int = isinstance(value, int) and not isinstance(value, bool)
            if not is_int and (key in _INT_FIELDS or (key == "seed" and value is not None)):
                msg = f"Config value {key} must be an integer, got {value!r}"
                raise ConfigError(msg)
            if key == "init_program" and not isinstance(value, str):
                msg = f"Config value init_program must be a string, got {value!r}"
                raise ConfigError(msg)

        values = dict(data)
        try:
            if "bookkeeping_range" in values:
                low, high = values["bookkeeping_range"]
                values["bookkeeping_range"] = (int(low), int(high))
            if "partitions" in values:
                values["partitions"] = tuple(int(size) for size in values["partitions"])
        except (TypeError, ValueError) as e:
            msg = f"Invalid config value: {e}"
            raise ConfigError(msg) from e
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-serializable dict."""
        return {
            "interrupt_overhead": self.interrupt_overhead,
            "fork_vector": self.fork_vector,
            "exec_vector": self.exec_vector,
            "load_time_per_mb": self.load_time_per_mb,
            "bookkeeping_range": list(self.bookkeeping_range),
            "partitions": list(self.partitions),
            "vector_base": self.vector_base,
            "vector_size": self.vector_size,
            "init_program": self.init_program,
            "init_size": self.init_size,
            "seed": self.seed,
        }


def load_config(path: Path) -> SimulatorConfig:
    """Load a machine image from a JSON file.

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object,
            or holds invalid settings.

    """
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load machine image: {e}"
        raise ConfigError(msg) from e
    if not isinstance(data, dict):
        msg = f"Machine image must be a JSON object, got {type(data).__name__}"
        raise ConfigError(msg)
    return SimulatorConfig.from_dict(data)

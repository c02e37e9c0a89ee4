"""PyOS-Sim — an interrupt and fork/exec trace simulator.

Re-exports the simulation entry points so callers can write::

    from py_ossim import Simulator, SimulatorConfig
"""

from py_ossim.config import ConfigError, SimulatorConfig
from py_ossim.kernel import SimulationResult, Simulator

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "SimulationResult",
    "Simulator",
    "SimulatorConfig",
    "__version__",
]

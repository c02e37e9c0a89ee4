"""Process subsystem — PCBs and the PCB manager.

Re-exports public symbols so callers can write::

    from py_ossim.process import PCB, PcbManager
"""

from py_ossim.process.pcb import (
    INIT_PID,
    NO_PARENT,
    PCB,
    PcbManager,
    ProcessState,
    render_pcb_table,
)

__all__ = [
    "INIT_PID",
    "NO_PARENT",
    "PCB",
    "PcbManager",
    "ProcessState",
    "render_pcb_table",
]

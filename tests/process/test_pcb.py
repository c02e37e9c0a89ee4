"""Tests for PCBs and the PCB manager.

Fork creates a new PCB (fresh PID, snapshot copy of the parent).
Exec rewrites the existing PCB in place (same PID, new program).
"""

from py_ossim.logging import Logger
from py_ossim.memory.manager import MemoryManager
from py_ossim.process.pcb import INIT_PID, NO_PARENT, PCB, PcbManager, render_pcb_table

CHILD_PID = 1
PROGRAM_SIZE = 10


def _manager() -> tuple[PcbManager, Logger]:
    logger = Logger()
    return PcbManager(memory=MemoryManager(), logger=logger), logger


class TestCreateInit:
    """Verify the root record."""

    def test_init_identity(self) -> None:
        """Init is PID 0 with no parent."""
        manager, _ = _manager()
        init = manager.create_init()
        assert init.pid == INIT_PID
        assert init.parent_pid == NO_PARENT
        assert init.program_name == "init"
        assert init.size == 1

    def test_init_gets_memory(self) -> None:
        """Init is loaded into the smallest partition."""
        manager, _ = _manager()
        init = manager.create_init()
        assert init.partition_number == 6
        assert init.has_memory


class TestCloneForFork:
    """Verify fork cloning."""

    def test_child_identity(self) -> None:
        """The child gets the new PID and the parent's PID as parent."""
        manager, _ = _manager()
        parent = manager.create_init()
        child = manager.clone_for_fork(parent, CHILD_PID)
        assert child.pid == CHILD_PID
        assert child.parent_pid == parent.pid

    def test_child_mirrors_program(self) -> None:
        """The child starts with the parent's program, size and partition."""
        manager, _ = _manager()
        parent = manager.create_init()
        child = manager.clone_for_fork(parent, CHILD_PID)
        assert child.program_name == parent.program_name
        assert child.size == parent.size
        assert child.partition_number == parent.partition_number

    def test_child_is_independent(self) -> None:
        """Changing the child does not change the parent."""
        manager, _ = _manager()
        parent = manager.create_init()
        child = manager.clone_for_fork(parent, CHILD_PID)
        child.program_name = "other"
        assert parent.program_name == "init"

    def test_releasing_child_keeps_parent_memory(self) -> None:
        """The child's mirrored partition still belongs to the parent."""
        manager, _ = _manager()
        parent = manager.create_init()
        child = manager.clone_for_fork(parent, CHILD_PID)
        manager.release(child)
        assert child.partition_number == -1
        assert manager.memory.partition(parent.partition_number).owner == parent.pid


class TestReplaceForExec:
    """Verify exec replacement."""

    def test_keeps_pid(self) -> None:
        """Exec keeps the PID and parent PID."""
        manager, _ = _manager()
        record = manager.create_init()
        manager.replace_for_exec(record, "program1", PROGRAM_SIZE)
        assert record.pid == INIT_PID
        assert record.parent_pid == NO_PARENT

    def test_sets_program(self) -> None:
        """Exec installs the new program and size."""
        manager, _ = _manager()
        record = manager.create_init()
        assert manager.replace_for_exec(record, "program1", PROGRAM_SIZE)
        assert record.program_name == "program1"
        assert record.size == PROGRAM_SIZE
        assert record.partition_number == 4

    def test_frees_old_partition(self) -> None:
        """The old program's partition is released."""
        manager, _ = _manager()
        record = manager.create_init()
        manager.replace_for_exec(record, "program1", PROGRAM_SIZE)
        assert manager.memory.partition(6).is_free

    def test_allocation_failure_is_logged(self) -> None:
        """A program that fits nowhere is logged, not raised."""
        manager, logger = _manager()
        record = manager.create_init()
        assert not manager.replace_for_exec(record, "huge", 100, time=42)
        assert record.partition_number == -1
        assert record.program_name == "huge"
        errors = logger.errors
        assert len(errors) == 1
        assert errors[0].message == "Memory allocation failed for huge"
        assert errors[0].source == "memory"
        assert errors[0].time == 42


class TestRelease:
    """Verify memory release."""

    def test_release_unbinds(self) -> None:
        """Release frees the partition and unbinds the record."""
        manager, _ = _manager()
        record = manager.create_init()
        manager.release(record)
        assert not record.has_memory
        assert manager.memory.free_partitions == 6

    def test_release_twice(self) -> None:
        """Releasing an already released record is harmless."""
        manager, _ = _manager()
        record = manager.create_init()
        manager.release(record)
        manager.release(record)
        assert record.partition_number == -1

    def test_release_never_bound(self) -> None:
        """Releasing a record that never had memory is harmless."""
        manager, _ = _manager()
        record = PCB(pid=5, parent_pid=0, program_name="x", size=1)
        manager.release(record)
        assert not record.has_memory


class TestSnapshot:
    """Verify the rendered process table."""

    def test_running_then_waiting_in_order(self) -> None:
        """The running record comes first, then waiters in insertion order."""
        current = PCB(pid=3, parent_pid=1, program_name="child", size=2, partition_number=5)
        waiting = [
            PCB(pid=0, parent_pid=-1, program_name="init", size=1, partition_number=6),
            PCB(pid=1, parent_pid=0, program_name="shell", size=4, partition_number=4),
        ]
        rows = [line for line in render_pcb_table(current, waiting).splitlines() if "|" in line]
        assert "PID" in rows[0]
        assert "running" in rows[1]
        assert "child" in rows[1]
        assert "init" in rows[2]
        assert "waiting" in rows[2]
        assert "shell" in rows[3]

    def test_table_is_boxed(self) -> None:
        """Borders and rows have the same width."""
        current = PCB(pid=0, parent_pid=-1, program_name="init", size=1, partition_number=6)
        lines = render_pcb_table(current, []).splitlines()
        assert lines[0].startswith("+")
        assert {len(line) for line in lines} == {len(lines[0])}

    def test_manager_snapshot_matches_render(self) -> None:
        """PcbManager.snapshot renders the same table."""
        manager, _ = _manager()
        record = manager.create_init()
        assert manager.snapshot(record, []) == render_pcb_table(record, [])

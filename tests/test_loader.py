"""Tests for the program loader and the input table parsers."""

from pathlib import Path

import pytest

from py_ossim.loader import (
    DirectoryTraceSource,
    InMemoryTraceSource,
    ProgramCatalog,
    ProgramLoader,
    ProgramLoadError,
    parse_delay_table,
    parse_vector_table,
)

PROGRAM1_SIZE = 10


class TestTableParsers:
    """Verify the vector and device table parsers."""

    def test_vector_table(self) -> None:
        """One address per line, blank lines skipped."""
        assert parse_vector_table(["0X01E3\n", "", " 0X029C "]) == ("0X01E3", "0X029C")

    def test_delay_table(self) -> None:
        """One integer per line."""
        assert parse_delay_table(["110", "150", ""]) == (110, 150)

    def test_delay_table_rejects_text(self) -> None:
        """A non-integer delay raises ValueError."""
        with pytest.raises(ValueError, match="invalid literal"):
            parse_delay_table(["fast"])


class TestProgramCatalog:
    """Verify the external files catalog."""

    def test_parse(self) -> None:
        """``<name>, <size>`` lines become catalog entries."""
        catalog = ProgramCatalog.parse(["program1, 10", "program2,15", ""])
        assert catalog.items() == [("program1", PROGRAM1_SIZE), ("program2", 15)]

    def test_parse_rejects_missing_size(self) -> None:
        """A line without a size raises ValueError."""
        with pytest.raises(ValueError, match="program-name"):
            ProgramCatalog.parse(["program1"])

    def test_size_of(self) -> None:
        """Known programs report their size."""
        catalog = ProgramCatalog({"program1": PROGRAM1_SIZE})
        assert catalog.size_of("program1") == PROGRAM1_SIZE
        assert "program1" in catalog
        assert len(catalog) == 1

    def test_size_of_unknown_raises(self) -> None:
        """Unknown programs raise ProgramLoadError."""
        with pytest.raises(ProgramLoadError, match="not in the external files"):
            ProgramCatalog().size_of("missing")

    def test_describe(self) -> None:
        """The console listing names each program and size."""
        text = ProgramCatalog({"program1": PROGRAM1_SIZE}).describe()
        assert "program1: 10 Mb" in text

    def test_copy_on_create(self) -> None:
        """The catalog copies the mapping it is given."""
        sizes = {"program1": PROGRAM1_SIZE}
        catalog = ProgramCatalog(sizes)
        sizes["program2"] = 1
        assert "program2" not in catalog


class TestTraceSources:
    """Verify the trace source strategies."""

    def test_directory_source_reads_file(self, tmp_path: Path) -> None:
        """Traces are read from ``<name>.txt``."""
        (tmp_path / "program1.txt").write_text("CPU, 100\nSYSCALL, 4\n")
        source = DirectoryTraceSource(tmp_path)
        assert source.read_trace("program1") == ["CPU, 100", "SYSCALL, 4"]

    def test_directory_source_missing_file(self, tmp_path: Path) -> None:
        """A missing trace file raises ProgramLoadError."""
        source = DirectoryTraceSource(tmp_path)
        with pytest.raises(ProgramLoadError, match=r"Could not open program9\.txt"):
            source.read_trace("program9")

    def test_in_memory_source(self) -> None:
        """In-memory traces are returned as independent copies."""
        source = InMemoryTraceSource({"p": ["CPU, 1"]})
        lines = source.read_trace("p")
        lines.append("CPU, 2")
        assert source.read_trace("p") == ["CPU, 1"]

    def test_in_memory_source_missing(self) -> None:
        """Unknown programs raise ProgramLoadError."""
        with pytest.raises(ProgramLoadError):
            InMemoryTraceSource().read_trace("p")


class TestProgramLoader:
    """Verify the loader facade."""

    def test_loader_combines_catalog_and_source(self) -> None:
        """Size from the catalog, trace from the source."""
        loader = ProgramLoader(
            ProgramCatalog({"p": 3}),
            InMemoryTraceSource({"p": ["CPU, 1"]}),
        )
        assert loader.size_of("p") == 3
        assert loader.read_trace("p") == ["CPU, 1"]
        assert "p" in loader.catalog

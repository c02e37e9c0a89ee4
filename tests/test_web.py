"""Tests for the HTTP API.

Tests use ``pytest.importorskip`` so they are skipped gracefully when
Flask is not installed.
"""

from __future__ import annotations

from typing import Any

import pytest

flask = pytest.importorskip("flask")

from py_ossim.web.app import create_app  # noqa: E402

HTTP_OK = 200
HTTP_BAD_REQUEST = 400

VECTORS = ["0X01E3", "0X029C", "0X0695", "0X042B"]
DELAYS = [110, 150, 4, 200]


def _create_client() -> Any:
    """Create a test client from a fresh app."""
    app = create_app()
    app.config["TESTING"] = True
    return app.test_client()


class TestAppCreation:
    """Verify the app factory."""

    def test_create_app_returns_flask(self) -> None:
        """create_app should return a Flask application."""
        assert isinstance(create_app(), flask.Flask)


class TestSimulateEndpoint:
    """Verify the /api/simulate POST endpoint."""

    def test_simple_trace(self) -> None:
        """A CPU/SYSCALL trace returns the execution log and final time."""
        client = _create_client()
        response = client.post(
            "/api/simulate",
            json={"trace": ["CPU, 10", "SYSCALL, 2", "CPU, 5"], "vectors": VECTORS, "delays": DELAYS},
        )
        assert response.status_code == HTTP_OK
        data = response.get_json()
        assert data["time"] == 31
        assert data["execution"].startswith("0, 10, CPU Burst\n")
        assert data["status"] == ""

    def test_fork_exec_with_programs(self) -> None:
        """Programs sent in the body are available to EXEC."""
        client = _create_client()
        response = client.post(
            "/api/simulate",
            json={
                "trace": ["FORK, 10", "IF_CHILD", "EXEC program1, 50", "IF_PARENT", "CPU, 5"],
                "vectors": VECTORS,
                "delays": DELAYS,
                "programs": {"program1": {"size": 10, "trace": ["CPU, 100"]}},
                "config": {"seed": 3},
            },
        )
        assert response.status_code == HTTP_OK
        data = response.get_json()
        assert "current trace: FORK, 10" in data["status"]
        assert "current trace: EXEC program1, 50" in data["status"]
        assert any("forked" in line for line in data["log"])

    def test_missing_fields(self) -> None:
        """Leaving out a required field returns 400."""
        client = _create_client()
        response = client.post("/api/simulate", json={"trace": []})
        assert response.status_code == HTTP_BAD_REQUEST
        assert "vectors" in response.get_json()["error"]

    def test_not_json(self) -> None:
        """A non-JSON body returns 400."""
        client = _create_client()
        response = client.post("/api/simulate", data="hello")
        assert response.status_code == HTTP_BAD_REQUEST

    def test_malformed_trace(self) -> None:
        """A trace that breaks the grammar returns 400."""
        client = _create_client()
        response = client.post(
            "/api/simulate",
            json={"trace": ["JUMP, 1"], "vectors": VECTORS, "delays": DELAYS},
        )
        assert response.status_code == HTTP_BAD_REQUEST
        assert "Unknown activity" in response.get_json()["error"]

    def test_program_without_trace_is_reported(self) -> None:
        """A listed program with no trace is logged as unreadable on EXEC."""
        client = _create_client()
        response = client.post(
            "/api/simulate",
            json={
                "trace": ["EXEC program1, 5"],
                "vectors": VECTORS,
                "delays": DELAYS,
                "programs": {"program1": {"size": 10}},
            },
        )
        assert response.status_code == HTTP_OK
        log = response.get_json()["log"]
        assert any("Could not open program1.txt" in line for line in log)

    def test_programs_must_be_an_object(self) -> None:
        """A programs list instead of an object returns 400."""
        client = _create_client()
        response = client.post(
            "/api/simulate",
            json={"trace": [], "vectors": VECTORS, "delays": DELAYS, "programs": []},
        )
        assert response.status_code == HTTP_BAD_REQUEST
        assert "programs" in response.get_json()["error"]

    def test_bad_config(self) -> None:
        """An unknown config key returns 400."""
        client = _create_client()
        response = client.post(
            "/api/simulate",
            json={"trace": [], "vectors": VECTORS, "delays": DELAYS, "config": {"nope": 1}},
        )
        assert response.status_code == HTTP_BAD_REQUEST


class TestStatusEndpoint:
    """Verify the /api/status GET endpoint."""

    def test_status_returns_default_config(self) -> None:
        """The default machine configuration is returned."""
        client = _create_client()
        data = client.get("/api/status").get_json()
        assert data["config"]["interrupt_overhead"] == 10
        assert data["config"]["partitions"] == [40, 25, 15, 10, 8, 2]

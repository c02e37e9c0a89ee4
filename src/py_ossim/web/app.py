"""Flask application factory for the simulator's HTTP API.

A request to ``POST /api/simulate`` carries everything a run needs::

    {
        "trace": ["FORK, 10", "IF_CHILD, 0", "EXEC program1, 50", ...],
        "vectors": ["0X01E3", "0X029C", ...],
        "delays": [110, 150, ...],
        "programs": {"program1": {"size": 10, "trace": ["CPU, 100"]}},
        "config": {"seed": 7}
    }

and gets back the execution log, the status log, the final time, and
the operator log.
"""

from __future__ import annotations

from typing import Any

from flask import Flask, Response, jsonify, request

from py_ossim.config import ConfigError, SimulatorConfig
from py_ossim.io.interrupts import InterruptTable
from py_ossim.kernel import Simulator
from py_ossim.loader import InMemoryTraceSource, ProgramCatalog, ProgramLoader
from py_ossim.trace import TraceSyntaxError

_HTTP_BAD_REQUEST = 400


def _build_simulator(data: dict[str, Any]) -> Simulator:
    """Assemble a simulator from a request body.

    Raises:
        ValueError: If a field has the wrong shape.
        ConfigError: If the machine configuration is invalid.

    """
    programs = data.get("programs", {})
    if not isinstance(programs, dict) or not all(isinstance(e, dict) for e in programs.values()):
        msg = "programs must map each name to an object with a size"
        raise ValueError(msg)
    entries: dict[str, dict[str, Any]] = programs
    catalog = ProgramCatalog({name: int(entry["size"]) for name, entry in entries.items()})
    # A listed program without a trace is reported on EXEC like a missing file.
    source = InMemoryTraceSource(
        {name: entry["trace"] for name, entry in entries.items() if "trace" in entry}
    )
    table = InterruptTable(
        vectors=tuple(str(v) for v in data["vectors"]),
        delays=tuple(int(d) for d in data["delays"]),
    )
    return Simulator(
        table=table,
        loader=ProgramLoader(catalog, source),
        config=SimulatorConfig.from_dict(data.get("config", {})),
    )


def create_app() -> Flask:
    """Create and configure the Flask application.

    Returns:
        A configured Flask application ready to serve.

    """
    app = Flask(__name__)

    @app.route("/api/simulate", methods=["POST"])
    def simulate() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run one simulation and return its logs as JSON.

        Returns:
            JSON with ``execution``, ``status``, ``time`` and ``log`` fields.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "Expected a JSON object"}), _HTTP_BAD_REQUEST
        missing = [key for key in ("trace", "vectors", "delays") if key not in data]
        if missing:
            return jsonify({"error": f"Missing fields: {', '.join(missing)}"}), _HTTP_BAD_REQUEST

        try:
            simulator = _build_simulator(data)
            result = simulator.run(data["trace"])
        except (ConfigError, TraceSyntaxError, KeyError, TypeError, ValueError) as e:
            return jsonify({"error": str(e)}), _HTTP_BAD_REQUEST

        return jsonify(
            {
                "execution": result.execution_text,
                "status": result.status_text,
                "time": result.time,
                "log": [str(entry) for entry in simulator.logger.entries],
            }
        )

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the default machine configuration."""
        return jsonify({"config": SimulatorConfig().to_dict()})

    return app


def main() -> None:
    """Run the web API development server.

    This is the ``py-ossim-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)

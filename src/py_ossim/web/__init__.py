"""HTTP API for the simulator.

This package provides a Flask application that runs simulations sent
as JSON.  It is an **optional** extra — install with::

    pip install py-ossim[web]

The ``create_app`` factory in ``app.py`` serves two endpoints:

- ``POST /api/simulate`` — run a trace and return both logs as JSON.
- ``GET /api/status`` — the default machine configuration.
"""

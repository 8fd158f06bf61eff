"""REST API for Time Ledger.

This module provides a FastAPI-based REST API for multi-tenant time tracking.

Key features:
- Account registration, login and token revocation
- Owner-scoped CRUD for clients, projects and time logs
- Timer control (start/stop) with overlap protection
- Report aggregation as JSON, Markdown or Excel
- JWT-based authentication
- CORS support
- OpenAPI documentation

Usage:
    # Start server
    time-ledger api serve

    # Access API docs
    http://localhost:8000/docs
"""

__all__ = ["create_app", "run_server"]

from time_ledger.api.server import create_app, run_server  # noqa: F401

"""API endpoints.

This package contains all API endpoint routers organized by resource type.
Each module defines a FastAPI router that is included in the main application.

Available routers:
- system: Health checks
- auth: Registration, login, logout and the current user
- clients: Client management
- projects: Project management
- timelogs: Timer controls, time log CRUD and total hours
- reports: Report aggregation and document export
"""

__all__ = ["system", "auth", "clients", "projects", "timelogs", "reports"]

from time_ledger.api.endpoints import (  # noqa: F401
    auth,
    clients,
    projects,
    reports,
    system,
    timelogs,
)

"""FastAPI application server.

This module contains the main FastAPI application setup and server runner.
The API provides multi-tenant access to clients, projects, time logs and
reports.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from fastapi import FastAPI  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]

from time_ledger import __version__
from time_ledger.api.errors import register_exception_handlers
from time_ledger.api.middleware import setup_middleware
from time_ledger.core.clock import Clock, SystemClock
from time_ledger.core.config import CONFIG_ENV_VAR, ConfigManager
from time_ledger.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config: Optional[ConfigManager] = None, clock: Optional[Clock] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Optional configuration manager (creates default if None)
        clock: Optional clock (wall clock if None)

    Returns:
        Configured FastAPI application instance

    Example:
        >>> app = create_app()
        >>> # Or with custom config and a frozen clock
        >>> app = create_app(ConfigManager(path), FixedClock())
    """
    if config is None:
        config = ConfigManager()

    setup_logging(config)
    config.ensure_api_secret_key()

    app = FastAPI(
        title="Time Ledger API",
        description="Multi-tenant REST API for clients, projects and time logs",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Store config and clock in app state for dependency injection
    app.state.config = config
    app.state.clock = clock or SystemClock()

    register_exception_handlers(app)

    from time_ledger.api.endpoints import auth, clients, projects, reports, system, timelogs

    app.include_router(system.router, prefix="/api/v1", tags=["system"])
    app.include_router(auth.router, prefix="/api/v1", tags=["auth"])
    app.include_router(clients.router, prefix="/api/v1/clients", tags=["clients"])
    app.include_router(projects.router, prefix="/api/v1/projects", tags=["projects"])
    app.include_router(timelogs.router, prefix="/api/v1/project-timelogs", tags=["time logs"])
    app.include_router(reports.router, prefix="/api/v1", tags=["reports"])

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Root endpoint - redirect to docs."""
        return JSONResponse(
            {
                "message": "Time Ledger API",
                "version": __version__,
                "docs": "/docs",
                "health": "/api/v1/health",
            }
        )

    setup_middleware(app, config)

    logger.info("Time Ledger API ready (data in %s)", config.data_dir)
    return app


def run_server(
    host: str = "localhost",
    port: int = 8000,
    reload: bool = False,
    workers: int = 1,
    ssl_certfile: Optional[Path] = None,
    ssl_keyfile: Optional[Path] = None,
    config: Optional[ConfigManager] = None,
) -> None:
    """Run the API server using Uvicorn.

    Args:
        host: Host address to bind to
        port: Port number to bind to
        reload: Enable auto-reload for development
        workers: Number of worker processes
        ssl_certfile: Path to SSL certificate file
        ssl_keyfile: Path to SSL key file
        config: Optional configuration manager

    Note:
        This function blocks until the server is stopped.
        SSL requires both cert_file and key_file to be specified.
        The per-user and store locks are in-process locks.
    """
    import uvicorn  # type: ignore[import-untyped]

    if config is None:
        config = ConfigManager()

    # The app factory runs in the server process and reads this path
    os.environ[CONFIG_ENV_VAR] = str(config.config_path)

    uvicorn_config = {
        "app": "time_ledger.api.server:create_app",
        "factory": True,
        "host": host,
        "port": port,
        "reload": reload,
        "workers": workers if not reload else 1,  # reload only works with 1 worker
        "log_level": config.get("api.advanced.log_level", "info"),
        "access_log": config.get("api.advanced.access_log", True),
    }

    if ssl_certfile and ssl_keyfile:
        uvicorn_config.update(
            {
                "ssl_certfile": str(ssl_certfile),
                "ssl_keyfile": str(ssl_keyfile),
            }
        )

    uvicorn.run(**uvicorn_config)

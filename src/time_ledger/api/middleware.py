"""Middleware for the FastAPI application.

This module provides middleware for CORS, per-user rate limiting and
request logging.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Optional

from fastapi import FastAPI, Request, Response  # type: ignore[import-untyped]
from fastapi.middleware.cors import CORSMiddleware  # type: ignore[import-untyped]
from jose import JWTError, jwt  # type: ignore[import-untyped]
from slowapi import Limiter  # type: ignore[import-untyped]
from slowapi.middleware import SlowAPIMiddleware  # type: ignore[import-untyped]
from slowapi.util import get_remote_address  # type: ignore[import-untyped]

from time_ledger.api.auth import ALGORITHM
from time_ledger.core.config import ConfigManager

logger = logging.getLogger(__name__)

# Reachable without a token, so never throttled
PUBLIC_PATHS = {
    "/",
    "/docs",
    "/docs/oauth2-redirect",
    "/redoc",
    "/openapi.json",
    "/api/v1/health",
    "/api/v1/register",
    "/api/v1/login",
}


def setup_cors(app: FastAPI, config: ConfigManager) -> None:
    """Configure CORS middleware.

    Args:
        app: FastAPI application instance
        config: Configuration manager

    Note:
        CORS is configured based on the api.cors section in config.
        By default, only localhost origins are allowed.
    """
    if not config.get("api.cors.enabled", True):
        return

    origins = config.get("api.cors.origins", ["http://localhost:3000"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_request_logging(app: FastAPI) -> None:
    """Log method, path, status and duration of every request."""

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def _token_subject(request: Request, secret_key: Optional[str]) -> Optional[str]:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token or not secret_key:
        return None
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    subject = payload.get("sub")
    return str(subject) if subject else None


def rate_limit_key(config: ConfigManager) -> Callable[[Request], str]:
    """Build the limiter key function: the token's user, else the client address.

    Example:
        >>> key = rate_limit_key(config)
        >>> key(request)  # with "Authorization: Bearer <token of user 7>"
        'user:7'
    """

    def key(request: Request) -> str:
        subject = _token_subject(request, config.get("api.authentication.secret_key"))
        if subject is not None:
            return f"user:{subject}"
        return get_remote_address(request)  # type: ignore[no-any-return]

    return key


def setup_rate_limiting(app: FastAPI, config: ConfigManager) -> Limiter:
    """Limit each user to api.rate_limiting.per_minute requests a minute.

    The count is shared across all protected routes. Routes in
    ``PUBLIC_PATHS`` are exempt. Counters are kept in memory, so each
    application instance counts separately.

    Args:
        app: FastAPI application instance, with its routes already included
        config: Configuration manager

    Returns:
        The limiter, also stored as ``app.state.limiter``
    """
    per_minute = config.get("api.rate_limiting.per_minute", 30)
    limiter = Limiter(
        key_func=rate_limit_key(config),
        application_limits=[f"{per_minute}/minute"],
        enabled=config.get("api.rate_limiting.enabled", True),
    )
    for route in app.routes:
        if getattr(route, "path", None) in PUBLIC_PATHS and hasattr(route, "endpoint"):
            limiter.exempt(route.endpoint)

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    return limiter


def setup_middleware(app: FastAPI, config: ConfigManager) -> None:
    """Set up all middleware for the application.

    Must run after the routers are included. Middleware added last runs
    first, so CORS wraps the request log, which wraps the limiter.

    Args:
        app: FastAPI application instance
        config: Configuration manager
    """
    setup_rate_limiting(app, config)
    setup_request_logging(app)
    setup_cors(app, config)

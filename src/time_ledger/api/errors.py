"""Mapping of core error classifications to HTTP responses.

Endpoints never catch core errors themselves; the handlers registered here
turn every :class:`TimeLedgerError` into a JSON envelope.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status  # type: ignore[import-untyped]
from fastapi.exceptions import RequestValidationError  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]
from slowapi.errors import RateLimitExceeded  # type: ignore[import-untyped]

from time_ledger.core.errors import TimeLedgerError

logger = logging.getLogger(__name__)

STATUS_BY_CLASSIFICATION = {
    "validation_failed": 422,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_400_BAD_REQUEST,
    "unauthorized": status.HTTP_401_UNAUTHORIZED,
    "internal": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def envelope(
    message: Any,
    status_code: int,
    data: Any = None,
    errors: Optional[dict[str, list[str]]] = None,
) -> dict[str, Any]:
    """Build the ``{"message", "data"?, "status"}`` body."""
    body: dict[str, Any] = {"message": message}
    if data is not None:
        body["data"] = data
    if errors:
        body["errors"] = errors
    body["status"] = status_code
    return body


async def time_ledger_error_handler(request: Request, exc: TimeLedgerError) -> JSONResponse:
    status_code = STATUS_BY_CLASSIFICATION.get(
        exc.classification, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        envelope(exc.message, status_code, errors=exc.errors),
        status_code=status_code,
        headers=headers,
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location) or "request"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    message = next(iter(errors.values()))[0] if errors else "Invalid request"
    status_code = 422
    return JSONResponse(envelope(message, status_code, errors=errors), status_code=status_code)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # Called synchronously by SlowAPIMiddleware
    logger.warning("Rate limit %s hit on %s %s", exc.detail, request.method, request.url.path)
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    return JSONResponse(
        envelope("Too Many Attempts.", status_code),
        status_code=status_code,
        headers={"Retry-After": "60"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error handlers on ``app``."""
    app.add_exception_handler(TimeLedgerError, time_ledger_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

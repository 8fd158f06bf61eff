"""System endpoints for health checks."""

from datetime import datetime, timezone

from fastapi import APIRouter  # type: ignore[import-untyped]

from time_ledger import __version__
from time_ledger.api.models import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint.

    Returns:
        Health status information

    Note:
        This endpoint is public (no authentication required).
        Use this for monitoring and load balancer health checks.

    Example:
        >>> GET /api/v1/health
        {
            "status": "healthy",
            "timestamp": "2025-06-01T10:30:00Z",
            "version": "0.1.0"
        }
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )

"""System endpoints for health checks."""

from datetime import datetime, timezone

from fastapi import APIRouter

from freelance_tracker import __version__
from freelance_tracker.api.models import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint.

    Example:
        >>> GET /api/v1/health
        {
            "status": "healthy",
            "timestamp": "2026-10-17T10:30:00Z",
            "version": "0.1.0"
        }
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )

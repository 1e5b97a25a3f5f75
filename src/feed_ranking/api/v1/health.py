"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from feed_ranking import __version__
from feed_ranking.config import Settings, get_settings
from feed_ranking.infrastructure.storage import KeyValueStorage, get_storage

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str
    timestamp: str
    dependencies: dict[str, Any]


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns the service status and version information.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc).isoformat(),
        dependencies={"storage": settings.storage_backend},
    )


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness_check(storage: KeyValueStorage = Depends(get_storage)) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Ranking still works without storage (it degrades to trend and noise), so
    the service reports ready and exposes the storage check separately.
    """
    checks = {"storage": storage.health_check()}
    return ReadinessResponse(ready=True, checks=checks)


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Returns 200 if the service is running."""
    return {"status": "alive"}

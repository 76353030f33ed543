"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from restock_service import __version__
from restock_service.api.dependencies import get_app_settings, get_restock_service
from restock_service.config import Settings
from restock_service.services.restock import RestockService

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str
    timestamp: str
    total: int
    pending: int
    notified: int
    uptime_seconds: float


@router.get("/health", response_model=HealthResponse)
async def health_check(
    service: RestockService = Depends(get_restock_service),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    """
    Service status with stock request counts.

    Read-only; safe for load balancer probes.
    """
    stats = service.stats()

    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc).isoformat(),
        total=stats.total,
        pending=stats.pending,
        notified=stats.notified,
        uptime_seconds=round(service.uptime_seconds, 3),
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """Returns 200 while the process is running."""
    return {"status": "alive"}


async def legacy_status(
    service: RestockService = Depends(get_restock_service),
) -> dict[str, Any]:
    """Status document in the shape the storefront's existing monitor reads."""
    stats = service.stats()
    return {
        "status": "Stock Notification Server Running",
        "total_requests": stats.total,
        "pending_requests": stats.pending,
        "notified_requests": stats.notified,
        "uptime": round(service.uptime_seconds, 3),
    }

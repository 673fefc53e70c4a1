"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings
from ...services.routing.osrm_client import OSRMClient, check_health

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/osrm", status_code=status.HTTP_200_OK)
def health_osrm() -> dict:
    """Check OSRM service health."""
    try:
        client = OSRMClient.from_settings(settings)
    except ValueError as exc:
        return {"service": "osrm", "healthy": False, "cost_model": settings.cost_model, "error": str(exc)}
    return {"service": "osrm", "healthy": check_health(client), "cost_model": settings.cost_model}

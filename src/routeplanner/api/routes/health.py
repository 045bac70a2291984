"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/provider", status_code=status.HTTP_200_OK)
def health_provider() -> dict:
    """Report which routing API is in use and whether it can be called."""
    return {
        "service": settings.routing_provider,
        "configured": bool(settings.google_maps_api_key),
        "max_waypoints_per_request": settings.max_waypoints_per_request,
        "max_total_stops": settings.max_total_stops,
    }

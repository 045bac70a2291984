"""Routing endpoints."""

from __future__ import annotations

import logging
from typing import List, Literal

from fastapi import APIRouter, HTTPException, Query, Response, status

from ...persistence.saved_routes import SavedRouteStore
from ...schemas.routing import OptimizeRequest, OptimizeResponse, SavedRouteModel
from ...services.export.geojson import route_to_geojson
from ...services.outputs.routing_formatter import optimized_route_to_csv, optimized_route_to_json
from ...services.routing.errors import (
    BatchFailure,
    NoRouteFoundError,
    ProviderError,
    ProviderNotConfiguredError,
    QuotaExceededError,
    RoutingError,
)
from ...services.routing.service import plan_route, saved_route_to_model

router = APIRouter(prefix="/routes", tags=["routes"])

logger = logging.getLogger(__name__)


def _status_for(exc: RoutingError) -> int:
    if isinstance(exc, BatchFailure):
        return _status_for(exc.cause)
    if isinstance(exc, ValueError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, NoRouteFoundError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(exc, QuotaExceededError):
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(exc, ProviderNotConfiguredError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(exc, ProviderError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@router.post("/optimize", response_model=OptimizeResponse, status_code=status.HTTP_200_OK)
async def optimize(payload: OptimizeRequest) -> OptimizeResponse:
    try:
        return await plan_route(payload)
    except RoutingError as exc:
        raise HTTPException(status_code=_status_for(exc), detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}",
        ) from exc


@router.get("/saved", response_model=List[SavedRouteModel], status_code=status.HTTP_200_OK)
def list_saved_routes() -> List[SavedRouteModel]:
    """Saved routes, newest first."""
    return [saved_route_to_model(saved) for saved in SavedRouteStore().list_routes()]


@router.get("/saved/{route_id}", response_model=SavedRouteModel, status_code=status.HTTP_200_OK)
def get_saved_route(route_id: str) -> SavedRouteModel:
    saved = SavedRouteStore().get(route_id)
    if saved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Route {route_id} not found")
    return saved_route_to_model(saved)


@router.delete("/saved/{route_id}", status_code=status.HTTP_200_OK)
def delete_saved_route(route_id: str) -> dict:
    if not SavedRouteStore().delete(route_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Route {route_id} not found")
    return {"success": True, "message": f"Route {route_id} deleted"}


@router.delete("/saved", status_code=status.HTTP_200_OK)
def clear_saved_routes() -> dict:
    SavedRouteStore().clear()
    return {"success": True, "message": "All saved routes deleted"}


@router.get("/saved/{route_id}/export", status_code=status.HTTP_200_OK)
def export_saved_route(
    route_id: str,
    format: Literal["json", "csv", "geojson"] = Query(default="json", description="Export format"),
):
    saved = SavedRouteStore().get(route_id)
    if saved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Route {route_id} not found")

    if format == "csv":
        return Response(
            content=optimized_route_to_csv(saved.route),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{route_id}.csv"'},
        )
    if format == "geojson":
        return route_to_geojson(saved.route)
    return optimized_route_to_json(saved.route)

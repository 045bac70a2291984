"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import TrafficModel


class StopModel(BaseModel):
    value: str = Field(..., description="Free-text address.")
    place_id: Optional[str] = Field(default=None, description="Provider place reference, when known.")


class RouteOptionsModel(BaseModel):
    traffic_aware: bool = False
    departure_time: Optional[datetime] = Field(
        default=None,
        description="Planned departure. Past times are moved a few minutes into the future.",
    )
    traffic_model: Optional[TrafficModel] = Field(
        default=None,
        description="Traffic assumption for traffic-aware routes. Defaults to the configured model.",
    )


class OptimizeRequest(BaseModel):
    stops: List[StopModel] = Field(..., description="Start, intermediate stops and end, in that order.")
    options: Optional[RouteOptionsModel] = None
    persist: bool = Field(default=False, description="Store the result among the saved routes.")


class SegmentModel(BaseModel):
    order: int
    address: str
    distance: float
    duration: float
    cumulative_distance: float
    cumulative_duration: float


class OptimizedRouteModel(BaseModel):
    segments: List[SegmentModel]
    total_distance: float
    total_duration: float
    polyline: str
    api_calls: int
    warnings: List[str] = Field(default_factory=list)


class OptimizeResponse(OptimizedRouteModel):
    saved_route_id: Optional[str] = None


class SavedRouteModel(BaseModel):
    id: str
    timestamp: int
    route: OptimizedRouteModel
    start_address: str
    end_address: str
    total_stops: int
    departure_time: Optional[int] = None
    route_mode: Optional[Literal["standard", "traffic"]] = None

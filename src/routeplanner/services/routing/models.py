"""Routing domain models shared between request building, provider adapters and reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...models.domain import Stop, TrafficModel

TRAVEL_MODE_DRIVING = "driving"


@dataclass(frozen=True, slots=True)
class TrafficOptions:
    departure_time: datetime
    traffic_model: TrafficModel


@dataclass(frozen=True, slots=True)
class RouteRequest:
    origin: Stop
    destination: Stop
    intermediates: tuple[Stop, ...]
    region: str
    optimize_waypoint_order: bool
    travel_mode: str = TRAVEL_MODE_DRIVING
    traffic: Optional[TrafficOptions] = None


@dataclass(frozen=True, slots=True)
class ProviderLeg:
    distance_meters: float
    static_duration_seconds: Optional[float] = None
    traffic_duration_seconds: Optional[float] = None


@dataclass(frozen=True, slots=True)
class ProviderRoute:
    """Provider-independent view of one routing answer."""

    legs: tuple[ProviderLeg, ...]
    polyline: str
    waypoint_order: Optional[tuple[int, ...]] = None
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Batch:
    """One request's worth of a segmented route."""

    number: int
    origin: Stop
    destination: Stop
    waypoints: tuple[Stop, ...]

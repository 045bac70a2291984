"""Domain models for stops, routing options and assembled itineraries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal, Optional


class TrafficModel(str, Enum):
    BEST_GUESS = "best_guess"
    OPTIMISTIC = "optimistic"
    PESSIMISTIC = "pessimistic"


@dataclass(frozen=True, slots=True)
class Stop:
    """One address entry. Identity is its position in the caller's list, not its text."""

    value: str
    place_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RouteOptions:
    traffic_aware: bool = False
    departure_time: Optional[datetime] = None
    traffic_model: TrafficModel = TrafficModel.BEST_GUESS


@dataclass(frozen=True, slots=True)
class Segment:
    """Arrival at one stop of the final itinerary."""

    order: int
    address: str
    distance: float
    duration: float
    cumulative_distance: float
    cumulative_duration: float


@dataclass(frozen=True, slots=True)
class OptimizedRoute:
    segments: tuple[Segment, ...]
    total_distance: float
    total_duration: float
    polyline: str
    api_calls: int
    warnings: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class SavedRoute:
    """A stored itinerary together with the inputs needed to display it again."""

    id: str
    timestamp: int
    route: OptimizedRoute
    start_address: str
    end_address: str
    total_stops: int
    departure_time: Optional[int] = None
    route_mode: Optional[Literal["standard", "traffic"]] = None

"""Serializers for optimized routes."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict

from ...models.domain import OptimizedRoute, Segment


def optimized_route_to_json(route: OptimizedRoute) -> dict:
    return {
        "segments": [asdict(segment) for segment in route.segments],
        "total_distance": route.total_distance,
        "total_duration": route.total_duration,
        "polyline": route.polyline,
        "api_calls": route.api_calls,
        "warnings": list(route.warnings),
    }


def optimized_route_from_json(data: dict) -> OptimizedRoute:
    return OptimizedRoute(
        segments=tuple(Segment(**segment) for segment in data.get("segments", [])),
        total_distance=data.get("total_distance", 0),
        total_duration=data.get("total_duration", 0),
        polyline=data.get("polyline", ""),
        api_calls=data.get("api_calls", 0),
        warnings=tuple(data.get("warnings") or ()),
    )


def optimized_route_to_csv(route: OptimizedRoute) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "order",
        "address",
        "distance_m",
        "duration_s",
        "cumulative_distance_m",
        "cumulative_duration_s",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for segment in route.segments:
        writer.writerow(
            {
                "order": segment.order,
                "address": segment.address,
                "distance_m": segment.distance,
                "duration_s": segment.duration,
                "cumulative_distance_m": segment.cumulative_distance,
                "cumulative_duration_s": segment.cumulative_duration,
            }
        )
    return buffer.getvalue()


def format_distance(meters: float) -> str:
    return f"{meters / 1000:.1f} km"


def format_duration(seconds: float) -> str:
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    if hours > 0:
        return f"{hours}h {minutes}min"
    return f"{minutes}min"

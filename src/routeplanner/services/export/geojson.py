"""GeoJSON export of an optimized route."""

from __future__ import annotations

from typing import Any, Dict

from ...models.domain import OptimizedRoute
from ..outputs.routing_formatter import format_distance, format_duration
from ..routing.polyline import decode_polyline


def route_to_geojson(route: OptimizedRoute) -> Dict[str, Any]:
    """Convert a route to a FeatureCollection holding its path as a LineString.

    GeoJSON uses lon,lat order. A route without geometry yields no features.
    """
    coordinates = decode_polyline(route.polyline) if route.polyline else []
    features = []
    if len(coordinates) >= 2:
        features.append(
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[lon, lat] for lat, lon in coordinates],
                },
                "properties": {
                    "total_distance": route.total_distance,
                    "total_duration": route.total_duration,
                    "total_distance_text": format_distance(route.total_distance),
                    "total_duration_text": format_duration(route.total_duration),
                    "stops": [segment.address for segment in route.segments],
                    "stop_count": len(route.segments),
                },
            }
        )
    return {"type": "FeatureCollection", "features": features}

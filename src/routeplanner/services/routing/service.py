"""Routing orchestration service used by the HTTP layer."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import timedelta
from typing import Sequence

from ...config import settings
from ...models.domain import OptimizedRoute, RouteOptions, SavedRoute, Stop
from ...persistence.saved_routes import SavedRouteStore
from ...schemas.routing import (
    OptimizedRouteModel,
    OptimizeRequest,
    OptimizeResponse,
    RouteOptionsModel,
    SavedRouteModel,
    SegmentModel,
    StopModel,
)
from .errors import ProviderNotConfiguredError, TooManyStopsError
from .google_client import RouteClient, get_route_client
from .optimizer import RouteOptimizer

logger = logging.getLogger(__name__)


def _clean_stops(stops: Sequence[StopModel]) -> list[Stop]:
    cleaned = []
    for stop in stops:
        value = stop.value.strip()
        if not value:
            continue
        cleaned.append(Stop(value=value, place_id=stop.place_id or None))
    return cleaned


def _build_options(payload: RouteOptionsModel | None) -> RouteOptions:
    if payload is None:
        return RouteOptions(traffic_model=settings.default_traffic_model)
    return RouteOptions(
        traffic_aware=payload.traffic_aware,
        departure_time=payload.departure_time,
        traffic_model=payload.traffic_model or settings.default_traffic_model,
    )


def build_route_client() -> RouteClient:
    if not settings.google_maps_api_key:
        raise ProviderNotConfiguredError()
    base_url = settings.routes_api_url if settings.routing_provider == "routes" else settings.directions_api_url
    return get_route_client(
        settings.routing_provider,
        settings.google_maps_api_key,
        base_url=base_url,
        timeout=settings.request_timeout_seconds,
    )


def build_optimizer(client: RouteClient) -> RouteOptimizer:
    return RouteOptimizer(
        client,
        max_waypoints=settings.max_waypoints_per_request,
        batch_size=settings.effective_batch_size,
        region=settings.region_code,
        departure_lead=timedelta(seconds=settings.departure_lead_seconds),
    )


def route_to_model(route: OptimizedRoute) -> OptimizedRouteModel:
    return OptimizedRouteModel(
        segments=[SegmentModel(**asdict(segment)) for segment in route.segments],
        total_distance=route.total_distance,
        total_duration=route.total_duration,
        polyline=route.polyline,
        api_calls=route.api_calls,
        warnings=list(route.warnings),
    )


def saved_route_to_model(saved: SavedRoute) -> SavedRouteModel:
    return SavedRouteModel(
        id=saved.id,
        timestamp=saved.timestamp,
        route=route_to_model(saved.route),
        start_address=saved.start_address,
        end_address=saved.end_address,
        total_stops=saved.total_stops,
        departure_time=saved.departure_time,
        route_mode=saved.route_mode,
    )


async def plan_route(payload: OptimizeRequest) -> OptimizeResponse:
    stops = _clean_stops(payload.stops)
    if len(stops) > settings.max_total_stops:
        raise TooManyStopsError(len(stops), settings.max_total_stops)
    if len(stops) != len(payload.stops):
        logger.info(f"Ignoring {len(payload.stops) - len(stops)} empty addresses")

    options = _build_options(payload.options)
    optimizer = build_optimizer(build_route_client())
    route = await optimizer.optimize(stops, options)

    saved_route_id = None
    if payload.persist:
        try:
            saved = SavedRouteStore().save(
                route,
                departure_time=options.departure_time,
                route_mode="traffic" if options.traffic_aware else "standard",
            )
            saved_route_id = saved.id
        except (OSError, ValueError) as exc:
            # The route is still valid; only the saved copy is lost.
            logger.error(f"Failed to save route: {exc}")

    return OptimizeResponse(**route_to_model(route).model_dump(), saved_route_id=saved_route_id)

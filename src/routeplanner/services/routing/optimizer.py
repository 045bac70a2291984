"""Route assembly: one optimised request, or a chain of segment requests."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Sequence

from ...models.domain import OptimizedRoute, RouteOptions, Stop
from .batching import plan_batches
from .errors import BatchFailure, InsufficientStopsError, ProviderError, RoutingError
from .google_client import RouteClient
from .models import Batch, ProviderLeg
from .polyline import stitch_polylines
from .reconciler import reconcile
from .request_builder import DEFAULT_DEPARTURE_LEAD, build_route_request, resolve_options

DEFAULT_MAX_WAYPOINTS_PER_REQUEST = 25
DEFAULT_REGION = "SE"

logger = logging.getLogger(__name__)


def _check_leg_count(legs: Sequence[ProviderLeg], batch: Batch) -> None:
    # One leg into each waypoint plus the leg into the batch destination.
    expected = len(batch.waypoints) + 1
    if len(legs) != expected:
        raise ProviderError(
            "UNEXPECTED_LEG_COUNT",
            f"expected {expected} legs for segment {batch.number}, got {len(legs)}",
        )


class RouteOptimizer:
    """Plan a driving route through an ordered list of stops.

    Up to ``max_waypoints`` intermediate stops are sent in a single request
    and the provider may reorder them. Longer lists are split into segments of
    ``batch_size`` stops that are requested one after another, each starting
    where the previous one ended, and are never reordered.
    """

    def __init__(
        self,
        client: RouteClient,
        *,
        max_waypoints: int = DEFAULT_MAX_WAYPOINTS_PER_REQUEST,
        batch_size: int | None = None,
        region: str = DEFAULT_REGION,
        departure_lead: timedelta = DEFAULT_DEPARTURE_LEAD,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if max_waypoints < 1:
            raise ValueError("max_waypoints must be at least 1.")
        self.client = client
        self.max_waypoints = max_waypoints
        self.batch_size = min(batch_size or max_waypoints, max_waypoints)
        self.region = region
        self.departure_lead = departure_lead
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def optimize(self, stops: Sequence[Stop], options: RouteOptions | None = None) -> OptimizedRoute:
        if len(stops) < 2:
            raise InsufficientStopsError(len(stops))

        options = resolve_options(options or RouteOptions(), now=self._clock(), lead=self.departure_lead)
        if options.traffic_aware and options.departure_time is not None:
            logger.info(f"Traffic-aware route using model {options.traffic_model.value}")

        origin = stops[0]
        destination = stops[-1]
        intermediates = list(stops[1:-1])
        logger.info(
            f"Planning route: {len(stops)} stops, {len(intermediates)} intermediate "
            f"(ceiling {self.max_waypoints})"
        )

        if len(intermediates) <= self.max_waypoints:
            return await self._optimize_single(stops, origin, destination, intermediates, options)
        return await self._optimize_segmented(stops, origin, destination, intermediates, options)

    async def _optimize_single(
        self,
        stops: Sequence[Stop],
        origin: Stop,
        destination: Stop,
        intermediates: list[Stop],
        options: RouteOptions,
    ) -> OptimizedRoute:
        request = build_route_request(
            origin,
            destination,
            intermediates,
            options,
            optimize_waypoint_order=True,
            region=self.region,
        )
        provider_route = await self.client.send(request)
        result = reconcile(provider_route.legs, stops, provider_route.waypoint_order)

        logger.info(
            f"Route optimized: {len(result.segments)} segments, 1 API call, "
            f"{result.total_distance:.0f} m, {result.total_duration:.0f} s"
        )
        return OptimizedRoute(
            segments=result.segments,
            total_distance=result.total_distance,
            total_duration=result.total_duration,
            polyline=provider_route.polyline,
            api_calls=1,
            warnings=provider_route.warnings,
        )

    async def _optimize_segmented(
        self,
        stops: Sequence[Stop],
        origin: Stop,
        destination: Stop,
        intermediates: list[Stop],
        options: RouteOptions,
    ) -> OptimizedRoute:
        batches = plan_batches(origin, destination, intermediates, self.batch_size)
        logger.info(f"Splitting route into {len(batches)} segments of up to {self.batch_size} stops")

        legs: list[ProviderLeg] = []
        polylines: list[str] = []
        api_calls = 0

        # Sequential on purpose: each segment starts at the previous segment's destination.
        for batch in batches:
            logger.info(
                f"Segment {batch.number}/{len(batches)}: {len(batch.waypoints)} waypoints "
                f"-> {batch.destination.value}"
            )
            request = build_route_request(
                batch.origin,
                batch.destination,
                batch.waypoints,
                options,
                optimize_waypoint_order=False,
                region=self.region,
            )
            api_calls += 1
            try:
                provider_route = await self.client.send(request)
                _check_leg_count(provider_route.legs, batch)
            except RoutingError as exc:
                logger.warning(f"Segment {batch.number}/{len(batches)} failed: {exc}")
                raise BatchFailure(batch.number, len(batches), exc) from exc
            legs.extend(provider_route.legs)
            polylines.append(provider_route.polyline)

        result = reconcile(legs, stops)
        logger.info(
            f"Segmented route complete: {len(result.segments)} segments, {api_calls} API calls, "
            f"{result.total_distance:.0f} m, {result.total_duration:.0f} s"
        )
        return OptimizedRoute(
            segments=result.segments,
            total_distance=result.total_distance,
            total_duration=result.total_duration,
            polyline=stitch_polylines(polylines),
            api_calls=api_calls,
            warnings=(f"The route was split into {len(batches)} segments.",),
        )

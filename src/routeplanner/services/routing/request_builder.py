"""Build provider-neutral routing requests."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Sequence

from ...models.domain import RouteOptions, Stop
from .models import RouteRequest, TrafficOptions

DEFAULT_DEPARTURE_LEAD = timedelta(minutes=5)

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_departure_time(
    departure_time: datetime,
    *,
    now: datetime | None = None,
    lead: timedelta = DEFAULT_DEPARTURE_LEAD,
) -> datetime:
    """Return ``departure_time`` if it lies in the future, otherwise ``now + lead``."""
    current = _as_utc(now or datetime.now(timezone.utc))
    departure = _as_utc(departure_time)
    if departure > current:
        return departure
    adjusted = current + lead
    logger.warning(
        f"Departure time {departure.isoformat()} is not in the future; using {adjusted.isoformat()} instead"
    )
    return adjusted


def resolve_options(
    options: RouteOptions,
    *,
    now: datetime | None = None,
    lead: timedelta = DEFAULT_DEPARTURE_LEAD,
) -> RouteOptions:
    """Return options whose departure time the provider will accept."""
    if options.departure_time is None:
        return options
    return RouteOptions(
        traffic_aware=options.traffic_aware,
        departure_time=resolve_departure_time(options.departure_time, now=now, lead=lead),
        traffic_model=options.traffic_model,
    )


def build_route_request(
    origin: Stop,
    destination: Stop,
    intermediates: Sequence[Stop],
    options: RouteOptions,
    *,
    optimize_waypoint_order: bool,
    region: str,
) -> RouteRequest:
    """Describe one driving request for the provider.

    Args:
        origin: First stop of the request
        destination: Last stop of the request
        intermediates: Stops visited in between
        options: Resolved route options
        optimize_waypoint_order: Whether the provider may reorder intermediates
        region: Region hint passed to the provider

    Returns:
        A request with a traffic block only when the options are traffic-aware
        and carry a departure time
    """
    traffic = None
    if options.traffic_aware and options.departure_time is not None:
        traffic = TrafficOptions(
            departure_time=_as_utc(options.departure_time),
            traffic_model=options.traffic_model,
        )
    return RouteRequest(
        origin=origin,
        destination=destination,
        intermediates=tuple(intermediates),
        region=region,
        optimize_waypoint_order=optimize_waypoint_order,
        traffic=traffic,
    )

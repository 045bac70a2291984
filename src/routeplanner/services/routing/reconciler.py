"""Turn provider legs into an ordered itinerary with running totals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

from ...models.domain import Segment, Stop
from .errors import ProviderError
from .models import ProviderLeg

DurationSource = Literal["traffic", "static"]


@dataclass(frozen=True, slots=True)
class Reconciliation:
    segments: tuple[Segment, ...]
    total_distance: float
    total_duration: float
    duration_source: DurationSource


def select_duration_source(legs: Sequence[ProviderLeg]) -> DurationSource:
    """Pick one duration source for the whole route.

    Traffic-aware durations win only when every leg carries one.
    """
    if all(leg.traffic_duration_seconds is not None for leg in legs):
        return "traffic"
    if all(leg.static_duration_seconds is not None for leg in legs):
        return "static"
    raise ProviderError("INCONSISTENT_DURATIONS", "some legs are missing a travel time")


def _validate_order(order: Sequence[int], intermediate_count: int) -> None:
    if sorted(order) != list(range(intermediate_count)):
        raise ProviderError(
            "INVALID_WAYPOINT_ORDER",
            f"expected a permutation of {intermediate_count} waypoints, got {list(order)}",
        )


def reconcile(
    legs: Sequence[ProviderLeg],
    stops: Sequence[Stop],
    optimized_order: Sequence[int] | None = None,
) -> Reconciliation:
    """Attribute each leg to the stop it arrives at and accumulate totals.

    Args:
        legs: Provider legs in travel order, one per stop after the origin
        stops: Stops as submitted, origin first and destination last
        optimized_order: ``optimized_order[i]`` is the original intermediate
            index visited i-th, as returned by the provider when it was allowed
            to reorder waypoints

    Returns:
        Segments starting with the origin at zero, plus route totals and the
        duration source used for every leg

    Raises:
        ProviderError: If the leg count, the order array or a leg value does
            not fit the submitted stops
    """
    if len(legs) != len(stops) - 1:
        raise ProviderError(
            "UNEXPECTED_LEG_COUNT",
            f"expected {len(stops) - 1} legs for {len(stops)} stops, got {len(legs)}",
        )
    if optimized_order:
        _validate_order(optimized_order, len(stops) - 2)

    source = select_duration_source(legs) if legs else "static"

    segments = [
        Segment(
            order=1,
            address=stops[0].value,
            distance=0,
            duration=0,
            cumulative_distance=0,
            cumulative_duration=0,
        )
    ]
    cumulative_distance = 0.0
    cumulative_duration = 0.0

    for index, leg in enumerate(legs):
        duration = leg.traffic_duration_seconds if source == "traffic" else leg.static_duration_seconds
        if leg.distance_meters < 0 or duration < 0:
            raise ProviderError("INVALID_LEG", f"leg {index + 1} has a negative distance or duration")
        cumulative_distance += leg.distance_meters
        cumulative_duration += duration

        if index == len(legs) - 1:
            stop_index = len(stops) - 1
        elif optimized_order:
            stop_index = optimized_order[index] + 1
        else:
            stop_index = index + 1

        segments.append(
            Segment(
                order=index + 2,
                address=stops[stop_index].value,
                distance=leg.distance_meters,
                duration=duration,
                cumulative_distance=cumulative_distance,
                cumulative_duration=cumulative_duration,
            )
        )

    return Reconciliation(
        segments=tuple(segments),
        total_distance=cumulative_distance,
        total_duration=cumulative_duration,
        duration_source=source,
    )

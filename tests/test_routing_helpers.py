from datetime import datetime, timedelta, timezone

import pytest

from routeplanner.models.domain import RouteOptions, Stop, TrafficModel
from routeplanner.services.routing.batching import batch_waypoints, plan_batches
from routeplanner.services.routing.errors import ProviderError
from routeplanner.services.routing.models import ProviderLeg
from routeplanner.services.routing.polyline import decode_polyline, encode_polyline, stitch_polylines
from routeplanner.services.routing.reconciler import reconcile, select_duration_source
from routeplanner.services.routing.request_builder import build_route_request, resolve_departure_time

NOW = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)
# Reference polyline from the Google encoding documentation
SAMPLE_POLYLINE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
SAMPLE_POINTS = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]


def _stops(count: int) -> list[Stop]:
    return [Stop(value=f"Address {i}") for i in range(count)]


def test_batch_waypoints_keeps_order():
    assert batch_waypoints([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
    assert batch_waypoints([1, 2, 3], 3) == [[1, 2, 3]]


def test_batch_waypoints_empty_list():
    assert batch_waypoints([], 25) == []


def test_batch_waypoints_rejects_zero_size():
    with pytest.raises(ValueError):
        batch_waypoints([1], 0)


def test_plan_batches_chains_destinations_to_origins():
    stops = _stops(9)
    batches = plan_batches(stops[0], stops[-1], stops[1:-1], 3)

    assert [batch.number for batch in batches] == [1, 2, 3]
    assert batches[0].origin == stops[0]
    assert batches[0].waypoints == (stops[1], stops[2])
    assert batches[0].destination == stops[3]
    assert batches[1].origin == stops[3]
    assert batches[1].destination == stops[6]
    assert batches[2].waypoints == (stops[7],)
    assert batches[2].destination == stops[8]
    for earlier, later in zip(batches, batches[1:]):
        assert earlier.destination == later.origin


def test_decode_reference_polyline():
    assert decode_polyline(SAMPLE_POLYLINE) == SAMPLE_POINTS


def test_encode_reference_polyline():
    assert encode_polyline(SAMPLE_POINTS) == SAMPLE_POLYLINE


def test_decode_truncated_polyline_fails():
    with pytest.raises(ValueError):
        decode_polyline(SAMPLE_POLYLINE[:-1])


def test_stitch_degenerate_cases():
    assert stitch_polylines([]) == ""
    assert stitch_polylines([SAMPLE_POLYLINE]) == SAMPLE_POLYLINE


def test_stitch_keeps_every_point_including_boundary():
    second = encode_polyline([SAMPLE_POINTS[-1], (44.0, -127.0)])
    stitched = stitch_polylines([SAMPLE_POLYLINE, second])

    points = decode_polyline(stitched)
    assert len(points) == len(SAMPLE_POINTS) + 2
    assert points[2] == points[3] == SAMPLE_POINTS[-1]


def test_resolve_departure_time_keeps_future_value():
    future = NOW + timedelta(hours=1)
    assert resolve_departure_time(future, now=NOW) == future


def test_resolve_departure_time_clamps_past_value():
    past = NOW - timedelta(hours=1)
    assert resolve_departure_time(past, now=NOW) == NOW + timedelta(minutes=5)
    assert resolve_departure_time(NOW, now=NOW, lead=timedelta(minutes=10)) == NOW + timedelta(minutes=10)


def test_resolve_departure_time_treats_naive_as_utc():
    naive = datetime(2026, 3, 2, 9, 0)
    assert resolve_departure_time(naive, now=NOW) == datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def test_build_route_request_with_traffic():
    stops = _stops(3)
    options = RouteOptions(
        traffic_aware=True,
        departure_time=NOW + timedelta(hours=1),
        traffic_model=TrafficModel.OPTIMISTIC,
    )
    request = build_route_request(
        stops[0], stops[2], stops[1:2], options, optimize_waypoint_order=True, region="SE"
    )

    assert request.travel_mode == "driving"
    assert request.region == "SE"
    assert request.optimize_waypoint_order is True
    assert request.intermediates == (stops[1],)
    assert request.traffic is not None
    assert request.traffic.traffic_model is TrafficModel.OPTIMISTIC


@pytest.mark.parametrize(
    "options",
    [
        RouteOptions(traffic_aware=False, departure_time=NOW),
        RouteOptions(traffic_aware=True, departure_time=None),
    ],
)
def test_build_route_request_without_traffic(options):
    stops = _stops(2)
    request = build_route_request(stops[0], stops[1], [], options, optimize_waypoint_order=False, region="SE")
    assert request.traffic is None


def test_reconcile_positional_attribution():
    stops = _stops(4)
    legs = [ProviderLeg(100, 10), ProviderLeg(200, 20), ProviderLeg(300, 30)]
    result = reconcile(legs, stops)

    assert [s.address for s in result.segments] == [stop.value for stop in stops]
    assert [s.distance for s in result.segments] == [0, 100, 200, 300]
    assert [s.cumulative_distance for s in result.segments] == [0, 100, 300, 600]
    assert [s.cumulative_duration for s in result.segments] == [0, 10, 30, 60]
    assert result.total_distance == 600
    assert result.total_duration == 60
    assert result.duration_source == "static"


def test_reconcile_uses_optimized_order():
    stops = _stops(5)
    legs = [ProviderLeg(1, 1)] * 4
    result = reconcile(legs, stops, optimized_order=[2, 0, 1])

    assert [s.address for s in result.segments[1:4]] == [stops[3].value, stops[1].value, stops[2].value]
    assert result.segments[4].address == stops[4].value


def test_reconcile_rejects_wrong_leg_count():
    with pytest.raises(ProviderError) as excinfo:
        reconcile([ProviderLeg(1, 1)], _stops(3))
    assert excinfo.value.code == "UNEXPECTED_LEG_COUNT"


def test_reconcile_rejects_invalid_order():
    with pytest.raises(ProviderError) as excinfo:
        reconcile([ProviderLeg(1, 1)] * 3, _stops(4), optimized_order=[0, 0])
    assert excinfo.value.code == "INVALID_WAYPOINT_ORDER"


def test_duration_source_never_mixes():
    all_traffic = [ProviderLeg(1, 10, 15), ProviderLeg(1, 10, 12)]
    partial_traffic = [ProviderLeg(1, 10, 15), ProviderLeg(1, 10, None)]

    assert select_duration_source(all_traffic) == "traffic"
    assert select_duration_source(partial_traffic) == "static"
    result = reconcile(partial_traffic, _stops(3))
    assert [s.duration for s in result.segments] == [0, 10, 10]


def test_duration_source_requires_one_complete_source():
    with pytest.raises(ProviderError) as excinfo:
        select_duration_source([ProviderLeg(1, None, 15), ProviderLeg(1, 10, None)])
    assert excinfo.value.code == "INCONSISTENT_DURATIONS"

"""HTTP clients for the Google routing APIs.

Two API generations are supported. Each adapter turns a ``RouteRequest`` into
its wire format and maps the answer, or the failure, onto ``ProviderRoute``
and the routing error types. No retries are attempted.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx

from ...models.domain import Stop, TrafficModel
from .errors import NoRouteFoundError, ProviderError, QuotaExceededError
from .models import ProviderLeg, ProviderRoute, RouteRequest

DEFAULT_TIMEOUT_SECONDS = 30.0
ROUTES_API_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"
DIRECTIONS_API_URL = "https://maps.googleapis.com/maps/api/directions/json"
ROUTES_FIELD_MASK = ",".join(
    [
        "routes.legs.distanceMeters",
        "routes.legs.duration",
        "routes.legs.staticDuration",
        "routes.polyline.encodedPolyline",
        "routes.optimizedIntermediateWaypointIndex",
    ]
)

_QUOTA_STATUSES = {"OVER_QUERY_LIMIT", "OVER_DAILY_LIMIT", "RESOURCE_EXHAUSTED"}

logger = logging.getLogger(__name__)


class RouteClient(ABC):
    """Contract for one routing request against a provider."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("A routing API key is required.")
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._http_client = http_client

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0)) as client:
            yield client

    @abstractmethod
    async def send(self, request: RouteRequest) -> ProviderRoute:
        raise NotImplementedError


def _json_body(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError as exc:
        raise ProviderError("INVALID_RESPONSE", f"HTTP {response.status_code}") from exc
    if not isinstance(data, dict):
        raise ProviderError("INVALID_RESPONSE", "expected a JSON object")
    return data


def _parse_seconds(value: Any) -> float | None:
    """Parse a protobuf duration such as ``"431s"``."""
    if value is None:
        return None
    text = str(value).strip()
    if text.endswith("s"):
        text = text[:-1]
    try:
        return float(text)
    except ValueError as exc:
        raise ProviderError("INVALID_RESPONSE", f"unreadable duration {value!r}") from exc


class GoogleRoutesClient(RouteClient):
    """Client for the Routes API ``computeRoutes`` endpoint."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = ROUTES_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(api_key, base_url=base_url, timeout=timeout, http_client=http_client)

    @staticmethod
    def _waypoint(stop: Stop) -> dict:
        if stop.place_id:
            return {"placeId": stop.place_id}
        return {"address": stop.value}

    def build_body(self, request: RouteRequest) -> dict:
        body: dict[str, Any] = {
            "origin": self._waypoint(request.origin),
            "destination": self._waypoint(request.destination),
            "intermediates": [self._waypoint(stop) for stop in request.intermediates],
            "travelMode": "DRIVE",
            "regionCode": request.region.lower(),
            "optimizeWaypointOrder": request.optimize_waypoint_order,
        }
        if request.traffic is None:
            body["routingPreference"] = "TRAFFIC_UNAWARE"
            return body

        body["departureTime"] = request.traffic.departure_time.strftime("%Y-%m-%dT%H:%M:%SZ")
        if request.optimize_waypoint_order:
            # computeRoutes rejects TRAFFIC_AWARE_OPTIMAL together with waypoint optimisation.
            body["routingPreference"] = "TRAFFIC_AWARE"
        else:
            body["routingPreference"] = "TRAFFIC_AWARE_OPTIMAL"
            body["trafficModel"] = request.traffic.traffic_model.value.upper()
        return body

    def parse_response(self, data: dict, request: RouteRequest) -> ProviderRoute:
        routes = data.get("routes") or []
        if not routes:
            raise NoRouteFoundError()
        route = routes[0]
        traffic_requested = request.traffic is not None

        legs = []
        for leg in route.get("legs", []):
            duration = _parse_seconds(leg.get("duration"))
            static = _parse_seconds(leg.get("staticDuration"))
            if static is None and not traffic_requested:
                static = duration
            legs.append(
                ProviderLeg(
                    distance_meters=float(leg.get("distanceMeters", 0)),
                    static_duration_seconds=static,
                    traffic_duration_seconds=duration if traffic_requested else None,
                )
            )

        order = route.get("optimizedIntermediateWaypointIndex") or None
        if order is not None and any(index < 0 for index in order):
            order = None
        return ProviderRoute(
            legs=tuple(legs),
            polyline=(route.get("polyline") or {}).get("encodedPolyline", ""),
            waypoint_order=tuple(order) if order else None,
            warnings=self._ignored_model_warnings(request),
        )

    @staticmethod
    def _ignored_model_warnings(request: RouteRequest) -> tuple[str, ...]:
        # build_body sends TRAFFIC_AWARE without a trafficModel when reordering.
        traffic = request.traffic
        if traffic is None or not request.optimize_waypoint_order:
            return ()
        if traffic.traffic_model is TrafficModel.BEST_GUESS:
            return ()
        logger.warning(
            f"Traffic model {traffic.traffic_model.value} is not supported with stop reordering; "
            "using the provider's default traffic estimate"
        )
        return (
            f"The '{traffic.traffic_model.value}' traffic model cannot be combined with stop "
            "optimisation; travel times use the standard traffic estimate.",
        )

    async def send(self, request: RouteRequest) -> ProviderRoute:
        headers = {
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": ROUTES_FIELD_MASK,
        }
        body = self.build_body(request)
        logger.debug(f"computeRoutes request with {len(request.intermediates)} intermediates")
        try:
            async with self._client() as client:
                response = await client.post(self.base_url, json=body, headers=headers)
        except httpx.TransportError as exc:
            raise ProviderError("NETWORK_ERROR", str(exc)) from exc

        if response.status_code >= 400:
            status = None
            message = None
            try:
                error = response.json().get("error", {})
                status = error.get("status")
                message = error.get("message")
            except (ValueError, AttributeError):
                pass
            if response.status_code == 429 or status in _QUOTA_STATUSES:
                raise QuotaExceededError()
            raise ProviderError(status or f"HTTP_{response.status_code}", message)

        return self.parse_response(_json_body(response), request)


class GoogleDirectionsClient(RouteClient):
    """Client for the legacy Directions JSON API."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DIRECTIONS_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(api_key, base_url=base_url, timeout=timeout, http_client=http_client)

    @staticmethod
    def _location(stop: Stop) -> str:
        if stop.place_id:
            return f"place_id:{stop.place_id}"
        return stop.value

    def build_params(self, request: RouteRequest) -> dict:
        params: dict[str, Any] = {
            "origin": self._location(request.origin),
            "destination": self._location(request.destination),
            "mode": request.travel_mode,
            "region": request.region.lower(),
            "key": self.api_key,
        }
        if request.intermediates:
            locations = [self._location(stop) for stop in request.intermediates]
            if request.optimize_waypoint_order:
                locations.insert(0, "optimize:true")
            params["waypoints"] = "|".join(locations)
        if request.traffic is not None:
            params["departure_time"] = int(request.traffic.departure_time.timestamp())
            params["traffic_model"] = request.traffic.traffic_model.value
        return params

    def parse_response(self, data: dict) -> ProviderRoute:
        status = data.get("status", "UNKNOWN_ERROR")
        if status == "ZERO_RESULTS":
            raise NoRouteFoundError()
        if status in _QUOTA_STATUSES:
            raise QuotaExceededError()
        if status != "OK":
            raise ProviderError(status, data.get("error_message"))

        routes = data.get("routes") or []
        if not routes:
            raise NoRouteFoundError()
        route = routes[0]

        legs = []
        for leg in route.get("legs", []):
            in_traffic = leg.get("duration_in_traffic")
            legs.append(
                ProviderLeg(
                    distance_meters=float(leg.get("distance", {}).get("value", 0)),
                    static_duration_seconds=(
                        float(leg["duration"]["value"]) if "duration" in leg else None
                    ),
                    traffic_duration_seconds=float(in_traffic["value"]) if in_traffic else None,
                )
            )

        order = route.get("waypoint_order") or None
        return ProviderRoute(
            legs=tuple(legs),
            polyline=(route.get("overview_polyline") or {}).get("points", ""),
            waypoint_order=tuple(order) if order else None,
        )

    async def send(self, request: RouteRequest) -> ProviderRoute:
        params = self.build_params(request)
        logger.debug(f"Directions request with {len(request.intermediates)} waypoints")
        try:
            async with self._client() as client:
                response = await client.get(self.base_url, params=params)
        except httpx.TransportError as exc:
            raise ProviderError("NETWORK_ERROR", str(exc)) from exc

        if response.status_code == 429:
            raise QuotaExceededError()
        if response.status_code >= 400:
            raise ProviderError(f"HTTP_{response.status_code}")
        return self.parse_response(_json_body(response))


def get_route_client(
    provider: str,
    api_key: str,
    *,
    base_url: str | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    http_client: httpx.AsyncClient | None = None,
) -> RouteClient:
    """Create the client for the configured provider.

    Args:
        provider: ``"routes"`` for the Routes API or ``"directions"`` for the
            legacy Directions API
        api_key: Google Maps API key
        base_url: Endpoint override, defaults to the provider's public URL
        timeout: Request timeout in seconds
        http_client: Shared ``httpx.AsyncClient``, mainly for tests

    Returns:
        A ``RouteClient`` for the provider

    Raises:
        ValueError: If the provider name is unknown
    """
    match provider:
        case "routes":
            return GoogleRoutesClient(
                api_key, base_url=base_url or ROUTES_API_URL, timeout=timeout, http_client=http_client
            )
        case "directions":
            return GoogleDirectionsClient(
                api_key, base_url=base_url or DIRECTIONS_API_URL, timeout=timeout, http_client=http_client
            )
        case _:
            raise ValueError(f"Unknown routing provider '{provider}'.")

"""Route assembly engine."""

from .errors import (
    BatchFailure,
    InsufficientStopsError,
    NoRouteFoundError,
    ProviderError,
    ProviderNotConfiguredError,
    QuotaExceededError,
    RoutingError,
    TooManyStopsError,
)
from .google_client import GoogleDirectionsClient, GoogleRoutesClient, RouteClient, get_route_client
from .optimizer import RouteOptimizer

__all__ = [
    "BatchFailure",
    "GoogleDirectionsClient",
    "GoogleRoutesClient",
    "InsufficientStopsError",
    "NoRouteFoundError",
    "ProviderError",
    "ProviderNotConfiguredError",
    "QuotaExceededError",
    "RouteClient",
    "RouteOptimizer",
    "RoutingError",
    "TooManyStopsError",
    "get_route_client",
]

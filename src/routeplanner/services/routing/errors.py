"""Failures raised while assembling a route."""

from __future__ import annotations


class RoutingError(Exception):
    """Base class for every routing failure. The message is shown to the user as-is."""


class InsufficientStopsError(RoutingError, ValueError):
    def __init__(self, count: int) -> None:
        super().__init__(f"At least 2 addresses are required to plan a route (got {count}).")
        self.count = count


class TooManyStopsError(RoutingError, ValueError):
    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"A route can have at most {limit} addresses (got {count}).")
        self.count = count
        self.limit = limit


class NoRouteFoundError(RoutingError):
    def __init__(self, message: str = "No route could be found between these addresses.") -> None:
        super().__init__(message)


class QuotaExceededError(RoutingError):
    def __init__(self, message: str = "The routing API quota has been reached. Wait a moment and try again.") -> None:
        super().__init__(message)


class ProviderError(RoutingError):
    """Any other non-success answer from the routing provider."""

    def __init__(self, code: str, message: str | None = None) -> None:
        detail = f"Routing API error: {code}"
        if message:
            detail = f"{detail} ({message})"
        super().__init__(detail)
        self.code = code


class ProviderNotConfiguredError(RoutingError):
    def __init__(self, message: str = "Routing is not configured: no Google Maps API key has been set.") -> None:
        super().__init__(message)


class BatchFailure(RoutingError):
    """A segment of a split route failed; the whole route is abandoned."""

    def __init__(self, batch_number: int, batch_count: int, cause: RoutingError) -> None:
        super().__init__(f"Segment {batch_number} of {batch_count} failed: {cause}")
        self.batch_number = batch_number
        self.batch_count = batch_count
        self.cause = cause

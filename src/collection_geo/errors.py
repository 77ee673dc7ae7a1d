"""Exceptions raised by the geolocation and routing services."""

from __future__ import annotations


class CollectionGeoError(Exception):
    """Base class for service errors."""


class EmptyRouteError(CollectionGeoError, ValueError):
    """Raised when a route is requested without any customers."""

    def __init__(self, message: str = "At least one stop is required to plan a route.") -> None:
        super().__init__(message)


class RouteNotFoundError(CollectionGeoError, LookupError):
    """Raised when a lifecycle operation targets an unknown route id."""

    def __init__(self, route_id: str) -> None:
        super().__init__(f"Route '{route_id}' not found.")
        self.route_id = route_id


class RouteStorageError(CollectionGeoError):
    """Raised when the route store cannot be read or written. Callers may retry."""

    retryable = True

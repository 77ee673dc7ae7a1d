"""Customer placement, clustering and location tracking."""

from .clustering import (
    build_clusters,
    customers_with_coordinates,
    default_risk_by_neighborhood,
)
from .resolver import CoordinateResolver, get_resolver
from .tracking import ReverseGeocoder, capture_location, format_time_ago

__all__ = [
    "CoordinateResolver",
    "ReverseGeocoder",
    "build_clusters",
    "capture_location",
    "customers_with_coordinates",
    "default_risk_by_neighborhood",
    "format_time_ago",
    "get_resolver",
]

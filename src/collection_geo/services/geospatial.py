"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_between(origin: GeoPoint, destination: GeoPoint) -> float:
    return haversine_km(origin.latitude, origin.longitude, destination.latitude, destination.longitude)


def centroid(points: list[GeoPoint]) -> GeoPoint | None:
    """Arithmetic mean of the given points, or None when there are none."""

    if not points:
        return None
    return GeoPoint(
        latitude=sum(point.latitude for point in points) / len(points),
        longitude=sum(point.longitude for point in points) / len(points),
    )

"""Nearest-neighbor sequencing of collection stops."""

from __future__ import annotations

import math
from typing import Sequence

from ...config import settings
from ...errors import EmptyRouteError
from ...models.domain import Customer, GeoPoint, ResolvedPoint, RouteStop
from ..geolocation.resolver import CoordinateResolver
from ..geospatial import distance_between


def estimate_minutes(distance_km: float, speed_kmh: float) -> int:
    """Travel time at a flat average speed, rounded half up to whole minutes."""

    return int(math.floor(distance_km / speed_kmh * 60 + 0.5))


def round_km(distance_km: float) -> float:
    return math.floor(distance_km * 10 + 0.5) / 10


def plan_stops(
    customers: Sequence[Customer],
    start: GeoPoint,
    resolver: CoordinateResolver,
    *,
    speed_kmh: float | None = None,
) -> list[RouteStop]:
    """Order customers by repeatedly visiting the closest unvisited one.

    Greedy and O(n^2); not an optimal tour. Ties go to the customer that came
    first in ``customers``. Each leg's distance is rounded to 0.1 km and its
    time estimated from ``speed_kmh``.
    """
    if not customers:
        raise EmptyRouteError()

    speed = speed_kmh or settings.average_speed_kmh
    # Resolve once so the point used to pick a stop is the point we travel to.
    remaining: list[tuple[Customer, ResolvedPoint]] = [
        (customer, resolver.resolve(customer)) for customer in customers
    ]
    current = start
    stops: list[RouteStop] = []

    while remaining:
        nearest_index = 0
        nearest_distance = math.inf
        for index, (_, resolved) in enumerate(remaining):
            distance = distance_between(current, resolved.point)
            if distance < nearest_distance:
                nearest_distance = distance
                nearest_index = index

        customer, resolved = remaining.pop(nearest_index)
        stops.append(
            RouteStop(
                order=len(stops) + 1,
                customer=customer,
                distance_km=round_km(nearest_distance),
                estimated_time_min=estimate_minutes(nearest_distance, speed),
                point=resolved.point,
                used_fallback=resolved.used_fallback,
            )
        )
        current = resolved.point

    return stops


def route_totals(stops: Sequence[RouteStop]) -> tuple[float, int]:
    """Sum of leg distances (km, one decimal) and leg times (minutes)."""

    total_distance = round(sum(stop.distance_km for stop in stops), 1)
    total_time = sum(stop.estimated_time_min for stop in stops)
    return total_distance, total_time

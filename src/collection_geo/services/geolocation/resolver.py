"""Customer-to-map placement with neighborhood and regional fallbacks."""

from __future__ import annotations

import random
from typing import Mapping, Optional

from ...config import Settings, settings as default_settings
from ...data.neighborhoods import NEIGHBORHOOD_CENTROIDS
from ...models.domain import Customer, GeoPoint, PointSource, ResolvedPoint


class CoordinateResolver:
    """Place a customer on the map.

    Explicit coordinates are authoritative and returned as-is. Otherwise the
    customer's neighborhood centroid is used, or the default region centroid,
    each with a uniform offset so customers sharing a location do not stack on
    a single marker. Output for non-explicit customers depends on ``rng`` and
    is not cached.
    """

    def __init__(
        self,
        *,
        rng: Optional[random.Random] = None,
        neighborhoods: Optional[Mapping[str, GeoPoint]] = None,
        default_region: Optional[GeoPoint] = None,
        neighborhood_jitter: Optional[float] = None,
        fallback_jitter: Optional[float] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.neighborhoods = neighborhoods if neighborhoods is not None else NEIGHBORHOOD_CENTROIDS
        self.default_region = default_region or GeoPoint(
            default_settings.default_region_latitude,
            default_settings.default_region_longitude,
        )
        self.neighborhood_jitter = (
            neighborhood_jitter if neighborhood_jitter is not None else default_settings.neighborhood_jitter_degrees
        )
        self.fallback_jitter = (
            fallback_jitter if fallback_jitter is not None else default_settings.fallback_jitter_degrees
        )

    @classmethod
    def from_settings(cls, config: Settings) -> "CoordinateResolver":
        rng = random.Random(config.random_seed) if config.random_seed is not None else random.Random()
        return cls(
            rng=rng,
            default_region=GeoPoint(config.default_region_latitude, config.default_region_longitude),
            neighborhood_jitter=config.neighborhood_jitter_degrees,
            fallback_jitter=config.fallback_jitter_degrees,
        )

    def resolve(self, customer: Customer) -> ResolvedPoint:
        if customer.latitude is not None and customer.longitude is not None:
            return ResolvedPoint(GeoPoint(customer.latitude, customer.longitude), PointSource.EXPLICIT)

        if customer.neighborhood:
            anchor = self.neighborhoods.get(customer.neighborhood)
            if anchor is not None:
                return ResolvedPoint(self._jitter(anchor, self.neighborhood_jitter), PointSource.NEIGHBORHOOD)

        return ResolvedPoint(self._jitter(self.default_region, self.fallback_jitter), PointSource.FALLBACK)

    def resolve_point(self, customer: Customer) -> GeoPoint:
        return self.resolve(customer).point

    def _jitter(self, anchor: GeoPoint, magnitude: float) -> GeoPoint:
        if magnitude <= 0:
            return anchor
        return GeoPoint(
            latitude=anchor.latitude + self.rng.uniform(-magnitude, magnitude),
            longitude=anchor.longitude + self.rng.uniform(-magnitude, magnitude),
        )


def get_resolver() -> CoordinateResolver:
    """Resolver configured from the application settings."""

    return CoordinateResolver.from_settings(default_settings)

"""Collection route orchestration: planning, persistence and lifecycle."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, Optional, Sequence

from ...config import Settings, settings as default_settings
from ...errors import RouteNotFoundError
from ...models.domain import CollectionRoute, Customer, GeoPoint, RouteStatus
from ...persistence.routes import RouteRepository, build_route_repository
from ..geolocation.resolver import CoordinateResolver, get_resolver
from .planner import plan_stops, route_totals

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_route_id() -> str:
    return f"route-{uuid.uuid4().hex}"


class RouteService:
    """Plans collection routes and drives their PLANNED -> IN_PROGRESS -> COMPLETED lifecycle."""

    def __init__(
        self,
        repository: RouteRepository,
        resolver: CoordinateResolver,
        *,
        config: Settings | None = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_route_id,
    ) -> None:
        self.repository = repository
        self.resolver = resolver
        self.config = config or default_settings
        self.clock = clock
        self.id_factory = id_factory

    @property
    def default_start(self) -> GeoPoint:
        return GeoPoint(self.config.default_region_latitude, self.config.default_region_longitude)

    def plan_route(
        self,
        name: str,
        customers: Sequence[Customer],
        start: Optional[GeoPoint] = None,
    ) -> CollectionRoute:
        """Build a nearest-neighbor route and store it before returning.

        Raises EmptyRouteError for an empty customer list. If the store
        rejects the write, RouteStorageError propagates and nothing is kept.
        """
        origin = start or self.default_start
        stops = plan_stops(customers, origin, self.resolver, speed_kmh=self.config.average_speed_kmh)
        total_distance, total_time = route_totals(stops)

        route = CollectionRoute(
            id=self.id_factory(),
            name=name,
            created_at=self.clock(),
            stops=stops,
            total_distance_km=total_distance,
            total_time_min=total_time,
            status=RouteStatus.PLANNED,
            start=origin,
            metadata={
                "average_speed_kmh": self.config.average_speed_kmh,
                "fallback_stops": sum(1 for stop in stops if stop.used_fallback),
            },
        )
        self.repository.upsert(route)
        logger.info(
            f"Created route '{route.name}' ({route.id}) with {len(stops)} stops, "
            f"{route.total_distance_km} km, {route.total_time_min} min"
        )
        return route

    def list_routes(self) -> list[CollectionRoute]:
        return self.repository.list_all()

    def get_route(self, route_id: str) -> CollectionRoute:
        route = self.repository.get(route_id)
        if route is None:
            raise RouteNotFoundError(route_id)
        return route

    def start_route(self, route_id: str) -> CollectionRoute:
        return self._set_status(route_id, RouteStatus.IN_PROGRESS)

    def complete_route(self, route_id: str) -> CollectionRoute:
        return self._set_status(route_id, RouteStatus.COMPLETED)

    def delete_route(self, route_id: str) -> None:
        if not self.repository.delete(route_id):
            raise RouteNotFoundError(route_id)
        logger.info(f"Deleted route {route_id}")

    def _set_status(self, route_id: str, status: RouteStatus) -> CollectionRoute:
        # No ordering guard: a route may be started twice or completed from PLANNED.
        route = self.get_route(route_id)
        previous = route.status
        route.status = status
        self.repository.upsert(route)
        logger.info(f"Route {route_id} status {previous.value} -> {status.value}")
        return route


@lru_cache()
def get_route_service() -> RouteService:
    """Service wired to the configured repository and resolver."""

    return RouteService(build_route_repository(), get_resolver())

from datetime import datetime, timezone
from pathlib import Path

import pytest

from collection_geo.errors import EmptyRouteError, RouteNotFoundError, RouteStorageError
from collection_geo.models.domain import CollectionRoute, Customer, GeoPoint, RouteStatus
from collection_geo.persistence.routes import InMemoryRouteRepository, JsonFileRouteRepository
from collection_geo.services.geolocation.resolver import CoordinateResolver
from collection_geo.services.routing.service import RouteService


FIXED_NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


def _customer(cid: str, lat: float, lon: float) -> Customer:
    return Customer(
        id=cid,
        name=f"Customer {cid}",
        status="ACTIVE",
        total_debt=250.0,
        neighborhood="Boa Viagem",
        city="Recife",
        latitude=lat,
        longitude=lon,
    )


def _service(repository=None) -> RouteService:
    counter = iter(range(1, 1000))
    return RouteService(
        repository or InMemoryRouteRepository(),
        CoordinateResolver(neighborhood_jitter=0.0, fallback_jitter=0.0),
        clock=lambda: FIXED_NOW,
        id_factory=lambda: f"route-{next(counter)}",
    )


def test_plan_route_persists_planned_route():
    service = _service()
    customers = [_customer("C1", -8.10, -34.90), _customer("C2", -8.05, -34.88)]

    route = service.plan_route("Monday north", customers, GeoPoint(-8.0476, -34.8770))

    assert route.id == "route-1"
    assert route.status is RouteStatus.PLANNED
    assert route.created_at == FIXED_NOW
    assert route.start == GeoPoint(-8.0476, -34.8770)
    assert [stop.customer.id for stop in route.stops] == ["C2", "C1"]
    assert route.total_distance_km == round(sum(stop.distance_km for stop in route.stops), 1)
    assert route.total_time_min == sum(stop.estimated_time_min for stop in route.stops)
    assert route.metadata["fallback_stops"] == 0
    assert [stored.id for stored in service.list_routes()] == ["route-1"]


def test_plan_route_uses_default_start_when_missing():
    service = _service()
    route = service.plan_route("Default", [_customer("C1", -8.0476, -34.8770)])
    assert route.start == service.default_start
    assert route.stops[0].distance_km == 0.0


def test_lifecycle_transitions():
    service = _service()
    route = service.plan_route("Route", [_customer("C1", -8.1, -34.9), _customer("C2", -8.2, -34.9)])

    assert service.get_route(route.id).status is RouteStatus.PLANNED
    assert service.start_route(route.id).status is RouteStatus.IN_PROGRESS
    assert service.get_route(route.id).status is RouteStatus.IN_PROGRESS
    assert service.complete_route(route.id).status is RouteStatus.COMPLETED
    assert service.get_route(route.id).status is RouteStatus.COMPLETED

    service.delete_route(route.id)
    assert service.list_routes() == []


def test_start_twice_keeps_in_progress():
    service = _service()
    route = service.plan_route("Route", [_customer("C1", -8.1, -34.9)])
    service.start_route(route.id)
    assert service.start_route(route.id).status is RouteStatus.IN_PROGRESS


def test_complete_accepted_from_planned():
    service = _service()
    route = service.plan_route("Route", [_customer("C1", -8.1, -34.9)])
    assert service.complete_route(route.id).status is RouteStatus.COMPLETED


def test_unknown_route_raises_not_found():
    service = _service()
    for operation in (service.get_route, service.start_route, service.complete_route, service.delete_route):
        with pytest.raises(RouteNotFoundError):
            operation("route-missing")


def test_empty_route_is_rejected_and_not_stored():
    service = _service()
    with pytest.raises(EmptyRouteError):
        service.plan_route("Empty", [])
    assert service.list_routes() == []


def test_storage_failure_propagates_and_stores_nothing():
    class FailingRepository(InMemoryRouteRepository):
        def upsert(self, route: CollectionRoute) -> None:
            raise RouteStorageError("disk full")

    repository = FailingRepository()
    service = _service(repository)

    with pytest.raises(RouteStorageError):
        service.plan_route("Route", [_customer("C1", -8.1, -34.9)])
    assert repository.list_all() == []


def test_routes_survive_reload_from_json_file(tmp_path: Path):
    path = tmp_path / "routes.json"
    service = _service(JsonFileRouteRepository(path=path))
    route = service.plan_route("Persisted", [_customer("C1", -8.1, -34.9), _customer("C2", -8.12, -34.91)])
    service.start_route(route.id)

    reloaded = RouteService(
        JsonFileRouteRepository(path=path),
        CoordinateResolver(neighborhood_jitter=0.0, fallback_jitter=0.0),
    ).get_route(route.id)

    assert reloaded.status is RouteStatus.IN_PROGRESS
    assert reloaded.name == "Persisted"
    assert reloaded.created_at == FIXED_NOW
    assert [stop.customer.id for stop in reloaded.stops] == [stop.customer.id for stop in route.stops]
    assert [stop.distance_km for stop in reloaded.stops] == [stop.distance_km for stop in route.stops]
    assert reloaded.stops[0].customer.total_debt == 250.0

from datetime import datetime, timezone
from pathlib import Path

import pytest

from collection_geo.errors import RouteStorageError
from collection_geo.models.domain import CollectionRoute, Customer, GeoPoint, RouteStatus, RouteStop
from collection_geo.persistence.filesystem import FileStorage
from collection_geo.persistence.routes import (
    InMemoryRouteRepository,
    JsonFileRouteRepository,
    SupabaseRouteRepository,
    build_route_repository,
    route_from_document,
    route_to_document,
)


def _route(route_id: str = "route-1", status: RouteStatus = RouteStatus.PLANNED) -> CollectionRoute:
    customer = Customer(id="C1", name="Maria", status="BLOCKED", total_debt=320.5, neighborhood="Pina", city="Recife")
    return CollectionRoute(
        id=route_id,
        name="Pina sweep",
        created_at=datetime(2026, 5, 4, 8, 0, tzinfo=timezone.utc),
        stops=[
            RouteStop(
                order=1,
                customer=customer,
                distance_km=2.4,
                estimated_time_min=5,
                point=GeoPoint(-8.0986, -34.882),
                used_fallback=True,
            )
        ],
        total_distance_km=2.4,
        total_time_min=5,
        status=status,
        start=GeoPoint(-8.0476, -34.877),
    )


def test_file_storage_writes_and_reads_json(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    path = storage.path_for("doc.json")

    assert storage.read_json(path, default=[]) == []
    storage.write_json(path, {"hello": "world"})

    assert path.read_text(encoding="utf-8") == '{\n  "hello": "world"\n}'
    assert storage.read_json(path) == {"hello": "world"}
    assert [p.name for p in tmp_path.iterdir()] == ["doc.json"]


def test_route_document_round_trip_keeps_stop_details() -> None:
    route = _route()
    document = route_to_document(route)

    assert document["status"] == "PLANNED"
    assert document["stops"][0]["customer"]["id"] == "C1"
    assert document["stops"][0]["point"] == {"lat": -8.0986, "lng": -34.882}

    restored = route_from_document(document)
    assert restored.stops[0].customer.status == "BLOCKED"
    assert restored.stops[0].used_fallback is True
    assert restored.start == route.start


def test_in_memory_repository_returns_copies() -> None:
    repository = InMemoryRouteRepository()
    repository.upsert(_route())

    fetched = repository.get("route-1")
    fetched.status = RouteStatus.COMPLETED

    assert repository.get("route-1").status is RouteStatus.PLANNED
    assert repository.delete("route-1") is True
    assert repository.delete("route-1") is False


def test_json_repository_upsert_replaces_by_id(tmp_path: Path) -> None:
    repository = JsonFileRouteRepository(path=tmp_path / "routes.json")
    repository.upsert(_route("route-1"))
    repository.upsert(_route("route-2"))
    repository.upsert(_route("route-1", status=RouteStatus.IN_PROGRESS))

    routes = repository.list_all()
    assert [route.id for route in routes] == ["route-1", "route-2"]
    assert routes[0].status is RouteStatus.IN_PROGRESS

    assert repository.delete("route-2") is True
    assert repository.delete("route-2") is False
    assert [route.id for route in repository.list_all()] == ["route-1"]


def test_json_repository_reports_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "routes.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(RouteStorageError):
        JsonFileRouteRepository(path=path).list_all()


class _FakeResponse:
    def __init__(self, data):
        self.data = data


class _FakeQuery:
    def __init__(self, table: "_FakeTable", action: str, payload=None):
        self.table = table
        self.action = action
        self.payload = payload
        self.filters: dict = {}

    def select(self, *_args, **_kwargs):
        return self

    def order(self, *_args, **_kwargs):
        return self

    def limit(self, *_args, **_kwargs):
        return self

    def eq(self, column, value):
        self.filters[column] = value
        return self

    def execute(self):
        rows = self.table.rows
        if self.table.fail:
            raise ConnectionError("network down")
        if self.action == "upsert":
            rows[self.payload["id"]] = self.payload
            return _FakeResponse([self.payload])
        matching = [row for key, row in rows.items() if self.filters.get("id", key) == key]
        if self.action == "delete":
            for row in matching:
                rows.pop(row["id"])
        return _FakeResponse(matching)


class _FakeTable:
    def __init__(self):
        self.rows: dict = {}
        self.fail = False

    def select(self, *args, **kwargs):
        return _FakeQuery(self, "select").select(*args, **kwargs)

    def upsert(self, payload, on_conflict=None):
        return _FakeQuery(self, "upsert", payload)

    def delete(self):
        return _FakeQuery(self, "delete")


class _FakeClient:
    def __init__(self):
        self.tables: dict = {}

    def table(self, name):
        return self.tables.setdefault(name, _FakeTable())


def test_supabase_repository_stores_documents() -> None:
    client = _FakeClient()
    repository = SupabaseRouteRepository(client=client, table="collection_routes")

    repository.upsert(_route("route-1"))
    repository.upsert(_route("route-2"))

    assert repository.get("route-2").name == "Pina sweep"
    assert repository.get("route-9") is None
    assert len(repository.list_all()) == 2
    assert repository.delete("route-1") is True
    assert repository.delete("route-1") is False


def test_supabase_repository_wraps_backend_errors() -> None:
    client = _FakeClient()
    repository = SupabaseRouteRepository(client=client, table="collection_routes")
    client.table("collection_routes").fail = True

    with pytest.raises(RouteStorageError):
        repository.upsert(_route())


def test_build_route_repository_honours_setting(tmp_path: Path) -> None:
    from collection_geo.config import Settings

    memory = build_route_repository(Settings(route_storage="memory"))
    assert isinstance(memory, InMemoryRouteRepository)

    file_repository = build_route_repository(Settings(route_storage="file", data_root=tmp_path))
    assert isinstance(file_repository, JsonFileRouteRepository)
    assert file_repository.path == tmp_path.resolve() / "routes.json"

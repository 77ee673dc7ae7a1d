"""Storage adapters for collection routes."""

from __future__ import annotations

import copy
import dataclasses
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from ..config import Settings, settings as default_settings
from ..data.customers_repository import customer_from_row
from ..db.supabase import get_supabase_client
from ..errors import RouteStorageError
from ..models.domain import CollectionRoute, GeoPoint, RouteStatus, RouteStop
from .filesystem import FileStorage

logger = logging.getLogger(__name__)


def _point_to_dict(point: Optional[GeoPoint]) -> Optional[dict]:
    if point is None:
        return None
    return {"lat": point.latitude, "lng": point.longitude}


def _point_from_dict(data: Optional[dict]) -> Optional[GeoPoint]:
    if not data:
        return None
    return GeoPoint(latitude=float(data["lat"]), longitude=float(data["lng"]))


def route_to_document(route: CollectionRoute) -> dict[str, Any]:
    """Serialize a route, nested stops and customers included, to plain JSON types."""

    stops = []
    for stop in route.stops:
        customer = dataclasses.asdict(stop.customer)
        if customer.get("last_location_update") is not None:
            customer["last_location_update"] = customer["last_location_update"].isoformat()
        stops.append(
            {
                "order": stop.order,
                "customer": customer,
                "distance_km": stop.distance_km,
                "estimated_time_min": stop.estimated_time_min,
                "point": _point_to_dict(stop.point),
                "used_fallback": stop.used_fallback,
            }
        )
    return {
        "id": route.id,
        "name": route.name,
        "created_at": route.created_at.isoformat(),
        "stops": stops,
        "total_distance_km": route.total_distance_km,
        "total_time_min": route.total_time_min,
        "status": route.status.value,
        "start": _point_to_dict(route.start),
        "metadata": route.metadata,
    }


def route_from_document(document: dict[str, Any]) -> CollectionRoute:
    stops = []
    for stop in document.get("stops", []):
        customer_row = dict(stop["customer"])
        last_update = customer_row.pop("last_location_update", None)
        has_realtime = bool(customer_row.pop("has_realtime_location", False))
        customer = customer_from_row(customer_row)
        customer.has_realtime_location = has_realtime
        if last_update:
            customer.last_location_update = datetime.fromisoformat(last_update)
        stops.append(
            RouteStop(
                order=int(stop["order"]),
                customer=customer,
                distance_km=float(stop["distance_km"]),
                estimated_time_min=int(stop["estimated_time_min"]),
                point=_point_from_dict(stop.get("point")),
                used_fallback=bool(stop.get("used_fallback", False)),
            )
        )
    return CollectionRoute(
        id=str(document["id"]),
        name=document["name"],
        created_at=datetime.fromisoformat(document["created_at"]),
        stops=stops,
        total_distance_km=float(document["total_distance_km"]),
        total_time_min=int(document["total_time_min"]),
        status=RouteStatus(document["status"]),
        start=_point_from_dict(document.get("start")),
        metadata=dict(document.get("metadata") or {}),
    )


class RouteRepository(ABC):
    """Key-value style store for CollectionRoute documents."""

    @abstractmethod
    def list_all(self) -> list[CollectionRoute]:
        raise NotImplementedError

    @abstractmethod
    def get(self, route_id: str) -> Optional[CollectionRoute]:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, route: CollectionRoute) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, route_id: str) -> bool:
        """Remove a route. Returns False when no route had that id."""
        raise NotImplementedError


class InMemoryRouteRepository(RouteRepository):
    def __init__(self) -> None:
        self._routes: dict[str, CollectionRoute] = {}

    def list_all(self) -> list[CollectionRoute]:
        return [copy.deepcopy(route) for route in self._routes.values()]

    def get(self, route_id: str) -> Optional[CollectionRoute]:
        route = self._routes.get(route_id)
        return copy.deepcopy(route) if route else None

    def upsert(self, route: CollectionRoute) -> None:
        self._routes[route.id] = copy.deepcopy(route)

    def delete(self, route_id: str) -> bool:
        return self._routes.pop(route_id, None) is not None


class JsonFileRouteRepository(RouteRepository):
    """All routes kept in a single JSON array on disk."""

    def __init__(self, path: Path | None = None, storage: FileStorage | None = None) -> None:
        target = path or default_settings.routes_file
        self.storage = storage or FileStorage(root=target.parent)
        self.path = target

    def _read(self) -> list[dict[str, Any]]:
        try:
            documents = self.storage.read_json(self.path, default=[])
        except (OSError, ValueError) as exc:
            raise RouteStorageError(f"Failed to read routes from {self.path}: {exc}") from exc
        if not isinstance(documents, list):
            raise RouteStorageError(f"Route file {self.path} does not contain a list.")
        return documents

    def _write(self, documents: list[dict[str, Any]]) -> None:
        try:
            self.storage.write_json(self.path, documents)
        except OSError as exc:
            raise RouteStorageError(f"Failed to write routes to {self.path}: {exc}") from exc

    def list_all(self) -> list[CollectionRoute]:
        return [route_from_document(document) for document in self._read()]

    def get(self, route_id: str) -> Optional[CollectionRoute]:
        for document in self._read():
            if document.get("id") == route_id:
                return route_from_document(document)
        return None

    def upsert(self, route: CollectionRoute) -> None:
        documents = self._read()
        document = route_to_document(route)
        for index, existing in enumerate(documents):
            if existing.get("id") == route.id:
                documents[index] = document
                break
        else:
            documents.append(document)
        self._write(documents)

    def delete(self, route_id: str) -> bool:
        documents = self._read()
        remaining = [document for document in documents if document.get("id") != route_id]
        if len(remaining) == len(documents):
            return False
        self._write(remaining)
        return True


class SupabaseRouteRepository(RouteRepository):
    """Routes stored one row per route; stops live in a JSON column."""

    def __init__(self, client: Any = None, table: str | None = None) -> None:
        self.client = client or get_supabase_client()
        if self.client is None:
            raise RouteStorageError(
                "Supabase not configured. Set COLLECTION_GEO_SUPABASE_URL and COLLECTION_GEO_SUPABASE_KEY."
            )
        self.table = table or default_settings.routes_table

    def _execute(self, action: str, query: Any) -> Any:
        try:
            return query.execute()
        except Exception as exc:
            logger.error(f"Supabase {action} on '{self.table}' failed: {exc}")
            raise RouteStorageError(f"Failed to {action} routes: {exc}") from exc

    def list_all(self) -> list[CollectionRoute]:
        response = self._execute("list", self.client.table(self.table).select("*").order("created_at"))
        return [route_from_document(row) for row in response.data or []]

    def get(self, route_id: str) -> Optional[CollectionRoute]:
        response = self._execute(
            "read", self.client.table(self.table).select("*").eq("id", route_id).limit(1)
        )
        rows = response.data or []
        return route_from_document(rows[0]) if rows else None

    def upsert(self, route: CollectionRoute) -> None:
        self._execute("save", self.client.table(self.table).upsert(route_to_document(route), on_conflict="id"))

    def delete(self, route_id: str) -> bool:
        response = self._execute("delete", self.client.table(self.table).delete().eq("id", route_id))
        return bool(response.data)


def build_route_repository(config: Settings | None = None) -> RouteRepository:
    """Create the repository selected by ``route_storage``."""

    config = config or default_settings
    if config.route_storage == "memory":
        return InMemoryRouteRepository()
    if config.route_storage == "supabase":
        return SupabaseRouteRepository(table=config.routes_table)
    return JsonFileRouteRepository(path=config.routes_file)

"""Collection route endpoints."""

from __future__ import annotations

import json
import logging
from typing import Callable, List, Literal, TypeVar

from fastapi import APIRouter, HTTPException, Query, Response, status

from ...data.customers_repository import get_customers_by_ids
from ...errors import RouteNotFoundError, RouteStorageError
from ...models.domain import CollectionRoute, GeoPoint
from ...persistence.routes import route_to_document
from ...schemas.routing import CollectionRouteModel, NavigationLinkModel, RouteCreateRequest
from ...services.outputs.route_formatter import route_to_csv, route_to_json, route_to_xlsx
from ...services.routing.navigation import navigation_links
from ...services.routing.service import get_route_service

router = APIRouter(prefix="/routes", tags=["routes"])

T = TypeVar("T")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def route_to_model(route: CollectionRoute) -> CollectionRouteModel:
    return CollectionRouteModel.model_validate(route_to_document(route))


def _run(action: str, operation: Callable[[], T]) -> T:
    """Translate service errors into HTTP responses."""
    try:
        return operation()
    except RouteNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except RouteStorageError as exc:
        logging.error(f"Route storage unavailable while trying to {action}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Route storage unavailable, please retry: {str(exc)}",
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error trying to {action}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action}: {str(exc)}",
        ) from exc


@router.get("", response_model=List[CollectionRouteModel], status_code=status.HTTP_200_OK)
def list_routes() -> List[CollectionRouteModel]:
    routes = _run("list routes", lambda: get_route_service().list_routes())
    return [route_to_model(route) for route in routes]


@router.post("", response_model=CollectionRouteModel, status_code=status.HTTP_201_CREATED)
def create_route(payload: RouteCreateRequest) -> CollectionRouteModel:
    """Plan a nearest-neighbor route over the selected customers and store it."""
    customers, missing = get_customers_by_ids(payload.customer_ids)
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown customer id(s): {', '.join(missing)}",
        )
    start = GeoPoint(payload.start.lat, payload.start.lng) if payload.start else None
    route = _run(
        "create route",
        lambda: get_route_service().plan_route(payload.name.strip(), customers, start),
    )
    return route_to_model(route)


@router.get("/{route_id}", response_model=CollectionRouteModel, status_code=status.HTTP_200_OK)
def get_route(route_id: str) -> CollectionRouteModel:
    return route_to_model(_run("load route", lambda: get_route_service().get_route(route_id)))


@router.post("/{route_id}/start", response_model=CollectionRouteModel, status_code=status.HTTP_200_OK)
def start_route(route_id: str) -> CollectionRouteModel:
    return route_to_model(_run("start route", lambda: get_route_service().start_route(route_id)))


@router.post("/{route_id}/complete", response_model=CollectionRouteModel, status_code=status.HTTP_200_OK)
def complete_route(route_id: str) -> CollectionRouteModel:
    return route_to_model(_run("complete route", lambda: get_route_service().complete_route(route_id)))


@router.delete("/{route_id}", status_code=status.HTTP_200_OK)
def delete_route(route_id: str) -> dict:
    _run("delete route", lambda: get_route_service().delete_route(route_id))
    return {"success": True, "message": f"Route {route_id} deleted"}


@router.get(
    "/{route_id}/navigation",
    response_model=List[NavigationLinkModel],
    status_code=status.HTTP_200_OK,
)
def get_navigation_links(route_id: str) -> List[NavigationLinkModel]:
    route = _run("load route", lambda: get_route_service().get_route(route_id))
    return [NavigationLinkModel(**entry) for entry in navigation_links(route)]


@router.get("/{route_id}/export", status_code=status.HTTP_200_OK)
def export_route(
    route_id: str,
    format: Literal["json", "csv", "xlsx"] = Query(default="csv", description="Export file format"),
) -> Response:
    route = _run("load route", lambda: get_route_service().get_route(route_id))
    if format == "json":
        return Response(
            content=json.dumps(route_to_json(route), ensure_ascii=False, indent=2),
            media_type="application/json",
        )
    filename = f"{route.id}.{format}"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    if format == "xlsx":
        return Response(content=route_to_xlsx(route), media_type=XLSX_MEDIA_TYPE, headers=headers)
    return Response(content=route_to_csv(route), media_type="text/csv", headers=headers)

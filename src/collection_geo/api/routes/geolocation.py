"""Customer map and neighborhood risk endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Query, status

from ...data.customers_repository import load_customers_with_locations
from ...models.domain import Customer, GeoCluster, GeoPoint
from ...schemas.geolocation import (
    CustomerMapPointModel,
    CustomerModel,
    GeoClusterModel,
    MapPointModel,
    NeighborhoodRiskModel,
)
from ...services.geolocation import (
    build_clusters,
    customers_with_coordinates,
    default_risk_by_neighborhood,
    format_time_ago,
    get_resolver,
)

router = APIRouter(prefix="/geo", tags=["geolocation"])


def point_to_model(point: GeoPoint) -> MapPointModel:
    return MapPointModel(lat=point.latitude, lng=point.longitude)


def customer_to_model(customer: Customer) -> CustomerModel:
    return CustomerModel(
        id=customer.id,
        name=customer.name,
        status=customer.status,
        total_debt=customer.total_debt,
        email=customer.email,
        neighborhood=customer.neighborhood,
        city=customer.city,
        state=customer.state,
        latitude=customer.latitude,
        longitude=customer.longitude,
        has_realtime_location=customer.has_realtime_location,
    )


def cluster_to_model(cluster: GeoCluster) -> GeoClusterModel:
    return GeoClusterModel(
        id=cluster.id,
        neighborhood=cluster.neighborhood,
        city=cluster.city,
        center=point_to_model(cluster.center),
        customer_count=cluster.customer_count,
        default_rate=cluster.default_rate,
        total_debt=cluster.total_debt,
        customers=[customer_to_model(customer) for customer in cluster.customers],
    )


@router.get("/clusters", response_model=List[GeoClusterModel], status_code=status.HTTP_200_OK)
def list_clusters() -> List[GeoClusterModel]:
    """Neighborhood clusters, highest default rate first."""
    clusters = build_clusters(load_customers_with_locations(), get_resolver())
    return [cluster_to_model(cluster) for cluster in clusters]


@router.get("/risk", response_model=List[NeighborhoodRiskModel], status_code=status.HTTP_200_OK)
def list_neighborhood_risk() -> List[NeighborhoodRiskModel]:
    entries = default_risk_by_neighborhood(load_customers_with_locations(), get_resolver())
    return [NeighborhoodRiskModel(**entry) for entry in entries]


@router.get("/customers", response_model=List[CustomerMapPointModel], status_code=status.HTTP_200_OK)
def list_customer_points(
    defaulted_only: bool = Query(default=False, description="Only blocked customers or customers with debt"),
    neighborhood: str | None = Query(default=None, description="Optional neighborhood (or city) filter"),
) -> List[CustomerMapPointModel]:
    now = datetime.now(timezone.utc)
    placed = customers_with_coordinates(
        load_customers_with_locations(),
        get_resolver(),
        defaulted_only=defaulted_only,
        neighborhood=neighborhood,
    )
    return [
        CustomerMapPointModel(
            customer=customer_to_model(customer),
            coords=point_to_model(resolved.point),
            source=resolved.source.value,
            used_fallback=resolved.used_fallback,
            last_update_label=(
                format_time_ago(customer.last_location_update, now)
                if customer.last_location_update
                else None
            ),
        )
        for customer, resolved in placed
    ]

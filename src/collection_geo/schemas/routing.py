"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .geolocation import CustomerModel, GeoPointModel, MapPointModel


class RouteCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Display name for the collection route.")
    customer_ids: List[str] = Field(..., min_length=1, description="Customers to visit, in any order.")
    start: Optional[GeoPointModel] = Field(
        default=None,
        description="Where the collector departs from. Defaults to the configured region center.",
    )


class RouteStopModel(BaseModel):
    order: int
    customer: CustomerModel
    distance_km: float
    estimated_time_min: int
    point: Optional[MapPointModel] = None
    used_fallback: bool = False


class CollectionRouteModel(BaseModel):
    id: str
    name: str
    created_at: str
    status: str
    total_distance_km: float
    total_time_min: int
    start: Optional[MapPointModel] = None
    stops: List[RouteStopModel]
    metadata: dict = Field(default_factory=dict)


class NavigationLinkModel(BaseModel):
    order: int
    customer_id: str
    customer_name: str
    latitude: float
    longitude: float
    google_maps: str
    waze: str
    apple_maps: str

"""Geolocation request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class MapPointModel(BaseModel):
    """A stored or resolved position, echoed back as-is."""

    lat: float
    lng: float


class GeoPointModel(MapPointModel):
    """A client-supplied position; must be a valid latitude and longitude."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class CustomerModel(BaseModel):
    id: str
    name: str
    status: str
    total_debt: float
    email: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    has_realtime_location: bool = False


class GeoClusterModel(BaseModel):
    id: str
    neighborhood: str
    city: str
    center: MapPointModel
    customer_count: int
    default_rate: float
    total_debt: float
    customers: List[CustomerModel]


class NeighborhoodRiskModel(BaseModel):
    neighborhood: str
    risk: float
    count: int


class CustomerMapPointModel(BaseModel):
    customer: CustomerModel
    coords: MapPointModel
    source: str
    used_fallback: bool
    last_update_label: Optional[str] = None


class CustomerLocationModel(BaseModel):
    customer_email: str
    customer_name: Optional[str] = None
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    updated_at: Optional[str] = None
    updated_label: Optional[str] = None


class LocationCaptureRequest(BaseModel):
    customer_email: str = Field(..., min_length=3)
    customer_name: Optional[str] = None
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: Optional[float] = Field(default=None, ge=0)

"""Domain models for customers, clusters and collection routes."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class CustomerStatus(str, Enum):
    ACTIVE = "ACTIVE"
    BLOCKED = "BLOCKED"


class RouteStatus(str, Enum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class PointSource(str, Enum):
    """How a customer's map position was obtained."""

    EXPLICIT = "explicit"
    NEIGHBORHOOD = "neighborhood"
    FALLBACK = "fallback"


@dataclass(slots=True)
class Customer:
    """Represents a borrower record as read from the customer directory."""

    id: str
    name: str
    status: str
    total_debt: float
    email: Optional[str] = None
    address: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    last_location_update: Optional[datetime] = None
    has_realtime_location: bool = False

    @property
    def is_defaulted(self) -> bool:
        return self.status == CustomerStatus.BLOCKED.value or self.total_debt > 0


@dataclass(slots=True)
class CustomerLocation:
    """A GPS position captured from a customer's device."""

    customer_email: str
    latitude: float
    longitude: float
    customer_name: Optional[str] = None
    accuracy: Optional[float] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class ResolvedPoint:
    """A map position together with where it came from."""

    point: GeoPoint
    source: PointSource

    @property
    def used_fallback(self) -> bool:
        return self.source is not PointSource.EXPLICIT


@dataclass(slots=True)
class GeoCluster:
    """Customers sharing a neighborhood or city label, with aggregated risk."""

    id: str
    neighborhood: str
    city: str
    center: GeoPoint
    customer_count: int
    default_rate: float
    total_debt: float
    customers: list[Customer]


@dataclass(slots=True)
class RouteStop:
    order: int
    customer: Customer
    distance_km: float
    estimated_time_min: int
    point: Optional[GeoPoint] = None
    used_fallback: bool = False


@dataclass(slots=True)
class CollectionRoute:
    id: str
    name: str
    created_at: datetime
    stops: list[RouteStop]
    total_distance_km: float
    total_time_min: int
    status: RouteStatus = RouteStatus.PLANNED
    start: Optional[GeoPoint] = None
    metadata: dict = field(default_factory=dict)

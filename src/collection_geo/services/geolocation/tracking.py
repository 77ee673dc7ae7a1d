"""Captured customer locations: reverse geocoding, storage and display helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import httpx

from ...config import settings
from ...data.customers_repository import location_from_row
from ...db.supabase import get_supabase_client
from ...errors import CollectionGeoError
from ...models.domain import CustomerLocation

logger = logging.getLogger(__name__)

ADDRESS_NOT_FOUND = "Endereço não encontrado"


@dataclass(slots=True)
class ReverseGeocodeResult:
    address: str
    city: str
    state: str


class ReverseGeocoder:
    """HTTP client for a Nominatim-compatible reverse geocoding endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url or settings.reverse_geocoder_url
        if not self.base_url:
            raise ValueError("Reverse geocoder URL is not configured.")
        self.user_agent = user_agent or settings.reverse_geocoder_user_agent
        self.timeout = timeout if timeout is not None else settings.reverse_geocoder_timeout_seconds
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=httpx.Timeout(self.timeout, connect=5.0))
        return self._client

    def reverse(self, latitude: float, longitude: float) -> Optional[ReverseGeocodeResult]:
        """Resolve a coordinate into a short street address. None when the lookup fails."""

        params = {
            "format": "json",
            "lat": latitude,
            "lon": longitude,
            "addressdetails": 1,
        }
        headers = {"Accept-Language": "pt-BR", "User-Agent": self.user_agent}
        try:
            response = self._get_client().get(self.base_url, params=params, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Reverse geocoding failed for (%s, %s): %s", latitude, longitude, exc)
            return None
        return parse_reverse_payload(payload)


def parse_reverse_payload(payload: dict) -> ReverseGeocodeResult:
    address = payload.get("address") or {}
    parts = [
        part
        for part in (
            address.get("road"),
            address.get("house_number"),
            address.get("suburb") or address.get("neighbourhood"),
        )
        if part
    ]
    display_name = payload.get("display_name")
    if parts:
        label = ", ".join(parts)
    elif display_name:
        label = ",".join(display_name.split(",")[:3])
    else:
        label = ADDRESS_NOT_FOUND

    city = (
        address.get("city")
        or address.get("town")
        or address.get("municipality")
        or address.get("county")
        or ""
    )
    return ReverseGeocodeResult(address=label, city=city, state=address.get("state") or "")


def capture_location(
    *,
    customer_email: str,
    latitude: float,
    longitude: float,
    customer_name: str | None = None,
    accuracy: float | None = None,
    geocoder: ReverseGeocoder | None = None,
    now: datetime | None = None,
) -> CustomerLocation:
    """Reverse-geocode a device position and upsert it as the customer's latest location."""

    supabase = get_supabase_client()
    if not supabase:
        raise CollectionGeoError("Location storage is not configured.")

    if geocoder is None and settings.reverse_geocoder_url:
        geocoder = ReverseGeocoder()
    geo = geocoder.reverse(latitude, longitude) if geocoder else None

    timestamp = now or datetime.now(timezone.utc)
    record = {
        "customer_email": customer_email,
        "customer_name": customer_name,
        "latitude": latitude,
        "longitude": longitude,
        "accuracy": accuracy,
        "address": geo.address if geo else None,
        "city": (geo.city or None) if geo else None,
        "state": (geo.state or None) if geo else None,
        "updated_at": timestamp.isoformat(),
    }
    supabase.table(settings.locations_table).upsert(record, on_conflict="customer_email").execute()
    logger.info("Saved location for %s at (%s, %s)", customer_email, latitude, longitude)
    return location_from_row(record)


def format_time_ago(timestamp: datetime, now: datetime | None = None) -> str:
    """Short pt-BR label for how long ago a location was captured."""

    current = now or datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)

    seconds = (current - timestamp).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 1:
        return "Agora"
    if minutes < 60:
        return f"{minutes} min atrás"
    if hours < 24:
        return f"{hours}h atrás"
    if days < 7:
        return f"{days} dias atrás"
    return timestamp.strftime("%d/%m/%Y")

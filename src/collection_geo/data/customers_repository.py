"""Data access helpers for loading customers and their captured locations."""

from __future__ import annotations

import csv
import dataclasses
import functools
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import Customer, CustomerLocation

logger = logging.getLogger(__name__)

GPS_NEIGHBORHOOD_LABEL = "Localização GPS"


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", ""))
    except ValueError as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Ignoring unparseable timestamp %r", value)
        return None


def customer_from_row(row: Mapping[str, Any]) -> Customer:
    """Build a Customer from a database row or CSV record (snake_case or camelCase keys)."""

    status = _clean(row.get("status")) or "ACTIVE"
    return Customer(
        id=str(row.get("id") or "").strip(),
        name=_clean(row.get("name")) or "",
        status=status.upper(),
        total_debt=_coerce_float(row.get("total_debt", row.get("totalDebt"))) or 0.0,
        email=_clean(row.get("email")),
        address=_clean(row.get("address")),
        neighborhood=_clean(row.get("neighborhood")),
        city=_clean(row.get("city")),
        state=_clean(row.get("state")),
        latitude=_coerce_float(row.get("latitude")),
        longitude=_coerce_float(row.get("longitude")),
    )


def location_from_row(row: Mapping[str, Any]) -> CustomerLocation:
    return CustomerLocation(
        customer_email=str(row["customer_email"]).strip(),
        customer_name=_clean(row.get("customer_name")),
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        accuracy=_coerce_float(row.get("accuracy")),
        address=_clean(row.get("address")),
        city=_clean(row.get("city")),
        state=_clean(row.get("state")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )


def _load_customers_from_database() -> tuple[Customer, ...] | None:
    """Load customers from Supabase. Returns None if the database is not configured."""
    supabase = get_supabase_client()
    if not supabase:
        return None

    response = (
        supabase.table(settings.customers_table)
        .select("*")
        .order("joined_at", desc=True)
        .execute()
    )
    customers: list[Customer] = []
    for row in response.data or []:
        try:
            customers.append(customer_from_row(row))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Skipping invalid customer row: {e}")
    return tuple(customers)


@functools.lru_cache(maxsize=1)
def load_customers_from_file(source: Optional[Path] = None) -> tuple[Customer, ...]:
    """Load customers from the configured CSV export."""

    csv_path = source or settings.customer_file
    if not csv_path.exists():
        raise FileNotFoundError(f"Customer file not found: {csv_path}")

    customers: list[Customer] = []
    with csv_path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise ValueError(f"Customer file '{csv_path}' is missing a header row.")
        for row in reader:
            customer = customer_from_row(row)
            if not customer.id:
                continue
            customers.append(customer)
    return tuple(customers)


def load_customers() -> tuple[Customer, ...]:
    """Return the full customer directory, database first, CSV export second.

    Read failures are logged and yield an empty directory so callers degrade to
    empty clusters and routes instead of failing the request.
    """
    try:
        db_customers = _load_customers_from_database()
    except Exception as e:
        logger.warning(f"Failed to load customers from database: {e}")
        return tuple()
    if db_customers is not None:
        return db_customers

    try:
        return load_customers_from_file()
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load customers from file: {e}")
        return tuple()


def load_customer_locations() -> list[CustomerLocation]:
    """Return captured locations, newest first. Empty when unavailable."""

    supabase = get_supabase_client()
    if not supabase:
        return []

    try:
        response = (
            supabase.table(settings.locations_table)
            .select("*")
            .order("updated_at", desc=True)
            .execute()
        )
    except Exception as e:
        logger.warning(f"Failed to load customer locations: {e}")
        return []

    locations: list[CustomerLocation] = []
    for row in response.data or []:
        try:
            locations.append(location_from_row(row))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning(f"Skipping invalid location row: {e}")
    return locations


def merge_customer_locations(
    customers: Iterable[Customer],
    locations: Sequence[CustomerLocation],
) -> list[Customer]:
    """Override customer coordinates with captured GPS positions, matched by email.

    Locations are expected newest first; the first match for an email wins.
    The captured address becomes the customer's neighborhood label when present.
    """
    by_email: dict[str, CustomerLocation] = {}
    for location in locations:
        by_email.setdefault(location.customer_email.lower(), location)

    merged: list[Customer] = []
    for customer in customers:
        location = by_email.get((customer.email or "").lower()) if customer.email else None
        if location is None:
            merged.append(customer)
            continue
        merged.append(
            dataclasses.replace(
                customer,
                address=location.address or customer.address,
                neighborhood=location.address or customer.neighborhood or GPS_NEIGHBORHOOD_LABEL,
                city=location.city or customer.city,
                state=location.state or customer.state,
                latitude=location.latitude,
                longitude=location.longitude,
                last_location_update=location.updated_at,
                has_realtime_location=True,
            )
        )
    return merged


def load_customers_with_locations() -> list[Customer]:
    """Customer directory enriched with any captured real-time locations."""

    return merge_customer_locations(load_customers(), load_customer_locations())


def get_customers_by_ids(customer_ids: Sequence[str]) -> tuple[list[Customer], list[str]]:
    """Return customers in the requested order, plus the ids that were not found."""

    directory = {customer.id: customer for customer in load_customers_with_locations()}
    found: list[Customer] = []
    missing: list[str] = []
    seen: set[str] = set()
    for raw_id in customer_ids:
        customer_id = raw_id.strip()
        if customer_id in seen:
            continue
        seen.add(customer_id)
        customer = directory.get(customer_id)
        if customer is None:
            missing.append(customer_id)
        else:
            found.append(customer)
    return found, missing


def set_active_customer_file(path: Path) -> None:
    """Update the active customer CSV and clear the file cache."""

    settings.customer_file = path
    load_customers_from_file.cache_clear()

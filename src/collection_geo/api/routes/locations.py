"""Captured customer location endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, HTTPException, status

from ...data.customers_repository import load_customer_locations
from ...errors import CollectionGeoError
from ...models.domain import CustomerLocation
from ...schemas.geolocation import CustomerLocationModel, LocationCaptureRequest
from ...services.geolocation import capture_location, format_time_ago

router = APIRouter(prefix="/locations", tags=["locations"])


def location_to_model(location: CustomerLocation, now: datetime) -> CustomerLocationModel:
    return CustomerLocationModel(
        customer_email=location.customer_email,
        customer_name=location.customer_name,
        latitude=location.latitude,
        longitude=location.longitude,
        accuracy=location.accuracy,
        address=location.address,
        city=location.city,
        state=location.state,
        updated_at=location.updated_at.isoformat() if location.updated_at else None,
        updated_label=format_time_ago(location.updated_at, now) if location.updated_at else None,
    )


@router.get("", response_model=List[CustomerLocationModel], status_code=status.HTTP_200_OK)
def list_locations() -> List[CustomerLocationModel]:
    """Latest captured location per customer, newest first."""
    now = datetime.now(timezone.utc)
    return [location_to_model(location, now) for location in load_customer_locations()]


@router.post("", response_model=CustomerLocationModel, status_code=status.HTTP_201_CREATED)
def save_location(payload: LocationCaptureRequest) -> CustomerLocationModel:
    try:
        location = capture_location(
            customer_email=payload.customer_email,
            customer_name=payload.customer_name,
            latitude=payload.latitude,
            longitude=payload.longitude,
            accuracy=payload.accuracy,
        )
    except CollectionGeoError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error saving location for {payload.customer_email}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save location: {str(exc)}",
        ) from exc
    return location_to_model(location, datetime.now(timezone.utc))

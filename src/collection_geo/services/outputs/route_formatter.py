"""Serializers for collection route exports."""

from __future__ import annotations

import csv
import io

from openpyxl import Workbook

from ...models.domain import CollectionRoute
from ...persistence.routes import route_to_document

MANIFEST_FIELDS = [
    "order",
    "customer_id",
    "customer_name",
    "neighborhood",
    "city",
    "total_debt",
    "latitude",
    "longitude",
    "approximate_location",
    "distance_km",
    "estimated_time_min",
]


def route_to_json(route: CollectionRoute) -> dict:
    return route_to_document(route)


def _manifest_rows(route: CollectionRoute) -> list[dict]:
    rows = []
    for stop in route.stops:
        rows.append(
            {
                "order": stop.order,
                "customer_id": stop.customer.id,
                "customer_name": stop.customer.name,
                "neighborhood": stop.customer.neighborhood or "",
                "city": stop.customer.city or "",
                "total_debt": stop.customer.total_debt,
                "latitude": stop.point.latitude if stop.point else "",
                "longitude": stop.point.longitude if stop.point else "",
                "approximate_location": "yes" if stop.used_fallback else "no",
                "distance_km": stop.distance_km,
                "estimated_time_min": stop.estimated_time_min,
            }
        )
    return rows


def route_to_csv(route: CollectionRoute) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=MANIFEST_FIELDS)
    writer.writeheader()
    for row in _manifest_rows(route):
        writer.writerow(row)
    return buffer.getvalue()


def route_to_xlsx(route: CollectionRoute) -> bytes:
    """Stop manifest workbook: a "Stops" sheet plus a "Summary" sheet."""

    workbook = Workbook()
    stops_sheet = workbook.active
    stops_sheet.title = "Stops"
    stops_sheet.append(MANIFEST_FIELDS)
    for row in _manifest_rows(route):
        stops_sheet.append([row[field] for field in MANIFEST_FIELDS])

    summary = workbook.create_sheet("Summary")
    summary.append(["route_id", route.id])
    summary.append(["name", route.name])
    summary.append(["status", route.status.value])
    summary.append(["created_at", route.created_at.isoformat()])
    summary.append(["stops", len(route.stops)])
    summary.append(["total_distance_km", route.total_distance_km])
    summary.append(["total_time_min", route.total_time_min])

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()

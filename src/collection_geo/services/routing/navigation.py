"""Turn-by-turn deep links for field collectors."""

from __future__ import annotations

from urllib.parse import urlencode

from ...models.domain import CollectionRoute, GeoPoint


def google_maps_url(point: GeoPoint) -> str:
    query = urlencode(
        {
            "api": 1,
            "destination": f"{point.latitude},{point.longitude}",
            "travelmode": "driving",
        }
    )
    return f"https://www.google.com/maps/dir/?{query}"


def waze_url(point: GeoPoint) -> str:
    query = urlencode({"ll": f"{point.latitude},{point.longitude}", "navigate": "yes"})
    return f"https://waze.com/ul?{query}"


def apple_maps_url(point: GeoPoint) -> str:
    query = urlencode({"daddr": f"{point.latitude},{point.longitude}", "dirflg": "d"})
    return f"https://maps.apple.com/?{query}"


def navigation_links(route: CollectionRoute) -> list[dict]:
    """One entry per stop with links for each supported navigation app.

    Stops planned without a recorded point (older documents) are skipped.
    """
    links: list[dict] = []
    for stop in route.stops:
        if stop.point is None:
            continue
        links.append(
            {
                "order": stop.order,
                "customer_id": stop.customer.id,
                "customer_name": stop.customer.name,
                "latitude": stop.point.latitude,
                "longitude": stop.point.longitude,
                "google_maps": google_maps_url(stop.point),
                "waze": waze_url(stop.point),
                "apple_maps": apple_maps_url(stop.point),
            }
        )
    return links

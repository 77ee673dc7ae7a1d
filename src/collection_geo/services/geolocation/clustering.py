"""Neighborhood clustering and default-risk analytics."""

from __future__ import annotations

import re
from typing import Iterable, Optional

from ...config import settings
from ...models.domain import Customer, GeoCluster, GeoPoint, ResolvedPoint
from ..geospatial import centroid
from .resolver import CoordinateResolver

UNASSIGNED_LABEL = "Sem Bairro"


def cluster_key(customer: Customer) -> str:
    return customer.neighborhood or customer.city or UNASSIGNED_LABEL


def cluster_id(label: str) -> str:
    return "cluster-" + re.sub(r"\s", "-", label.lower())


def default_rate(customers: list[Customer]) -> float:
    """Percentage of customers who are blocked or carry debt, one decimal."""

    if not customers:
        return 0.0
    defaulted = sum(1 for customer in customers if customer.is_defaulted)
    return round(defaulted / len(customers) * 100, 1)


def build_clusters(customers: Iterable[Customer], resolver: CoordinateResolver) -> list[GeoCluster]:
    """Group customers by neighborhood (or city) and rank groups by default rate.

    Every customer lands in exactly one cluster. The result is ordered by
    descending ``default_rate``; groups with equal rates keep first-seen order.
    """
    groups: dict[str, list[Customer]] = {}
    for customer in customers:
        groups.setdefault(cluster_key(customer), []).append(customer)

    fallback_center = GeoPoint(settings.default_region_latitude, settings.default_region_longitude)
    clusters: list[GeoCluster] = []
    for label, members in groups.items():
        points = [resolver.resolve_point(member) for member in members]
        clusters.append(
            GeoCluster(
                id=cluster_id(label),
                neighborhood=label,
                city=members[0].city or settings.default_city,
                center=centroid(points) or fallback_center,
                customer_count=len(members),
                default_rate=default_rate(members),
                total_debt=sum(member.total_debt for member in members),
                customers=members,
            )
        )

    return sorted(clusters, key=lambda cluster: cluster.default_rate, reverse=True)


def default_risk_by_neighborhood(customers: Iterable[Customer], resolver: CoordinateResolver) -> list[dict]:
    return [
        {"neighborhood": cluster.neighborhood, "risk": cluster.default_rate, "count": cluster.customer_count}
        for cluster in build_clusters(customers, resolver)
    ]


def customers_with_coordinates(
    customers: Iterable[Customer],
    resolver: CoordinateResolver,
    *,
    defaulted_only: bool = False,
    neighborhood: Optional[str] = None,
) -> list[tuple[Customer, ResolvedPoint]]:
    """Pair each customer with a map position, optionally filtered."""

    normalized = neighborhood.strip().lower() if neighborhood and neighborhood.strip() else None
    placed: list[tuple[Customer, ResolvedPoint]] = []
    for customer in customers:
        if defaulted_only and not customer.is_defaulted:
            continue
        if normalized and cluster_key(customer).lower() != normalized:
            continue
        placed.append((customer, resolver.resolve(customer)))
    return placed

"""Approximate centroids for neighborhoods of the Recife metropolitan area."""

from __future__ import annotations

from ..models.domain import GeoPoint

NEIGHBORHOOD_CENTROIDS: dict[str, GeoPoint] = {
    "Boa Viagem": GeoPoint(-8.1189, -34.9013),
    "Casa Amarela": GeoPoint(-8.0256, -34.9182),
    "Aflitos": GeoPoint(-8.0472, -34.8972),
    "Várzea": GeoPoint(-8.0439, -34.9579),
    "Ibura": GeoPoint(-8.1139, -34.9405),
    "Jardim São Paulo": GeoPoint(-8.0653, -34.9172),
    "Pina": GeoPoint(-8.0986, -34.8820),
    "Imbiribeira": GeoPoint(-8.1083, -34.9156),
    "Cordeiro": GeoPoint(-8.0494, -34.9233),
    "Madalena": GeoPoint(-8.0478, -34.9081),
    "Torre": GeoPoint(-8.0517, -34.8994),
    "Espinheiro": GeoPoint(-8.0381, -34.8939),
    "Derby": GeoPoint(-8.0556, -34.8989),
    "Graças": GeoPoint(-8.0414, -34.8919),
    "Parnamirim": GeoPoint(-8.0350, -34.9092),
    "Tamarineira": GeoPoint(-8.0292, -34.9111),
    "Encruzilhada": GeoPoint(-8.0281, -34.8853),
    "Rosarinho": GeoPoint(-8.0208, -34.8883),
    "Hipódromo": GeoPoint(-8.0236, -34.8981),
    "Santana": GeoPoint(-8.0189, -34.8894),
}


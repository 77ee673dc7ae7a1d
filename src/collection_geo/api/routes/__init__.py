"""Route group exports."""

from . import geolocation, health, locations, routes

__all__ = ["geolocation", "health", "locations", "routes"]

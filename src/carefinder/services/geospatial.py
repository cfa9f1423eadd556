"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import Coordinate

# Single radius for every distance the service reports, so the radius filter
# and the estimated-route fallback agree for the same pair of points.
EARTH_RADIUS_METERS = 6_371_000.0

COMPASS_POINTS = ("north", "north-east", "east", "south-east", "south", "south-west", "west", "north-west")


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Compute great-circle distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(a.latitude), math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_METERS * c


def bearing_degrees(a: Coordinate, b: Coordinate) -> float:
    """Calculate the initial bearing from ``a`` to ``b``."""

    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    delta_lambda = math.radians(b.longitude - a.longitude)
    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)
    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360) % 360


def compass_direction(bearing: float) -> str:
    """Name the eight-point compass sector containing ``bearing``."""

    index = int(((bearing % 360) + 22.5) // 45) % len(COMPASS_POINTS)
    return COMPASS_POINTS[index]

"""Display helpers for route metrics and external links."""

from __future__ import annotations

from urllib.parse import urlencode

from ...config import settings
from ...models.domain import Coordinate, RouteResult


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{round(meters)} m"
    return f"{meters / 1000:.2f} km"


def format_duration(seconds: float) -> str:
    if not seconds:
        return "0 min"
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes} min"


def route_label(route: RouteResult) -> str:
    return "Estimated (offline mode)" if route.is_estimated else "Routed"


def external_maps_link(origin: Coordinate, destination: Coordinate) -> str:
    """Deep link that hands the trip to a third-party maps application."""

    query = urlencode(
        {
            "api": "1",
            "origin": f"{origin.latitude},{origin.longitude}",
            "destination": f"{destination.latitude},{destination.longitude}",
            "travelmode": "driving",
        },
        safe=",",
    )
    return f"{settings.external_maps_url}?{query}"

"""Route resolution with straight-line fallback."""

from __future__ import annotations

import logging

from ...config import settings
from ...models.domain import Coordinate, RouteKind, RouteResult, RouteStep
from ..geospatial import bearing_degrees, compass_direction, distance_meters
from .errors import RoutingError
from .geoapify_client import GeoapifyClient, decode_route

logger = logging.getLogger(__name__)


def estimate_route(origin: Coordinate, destination: Coordinate) -> RouteResult:
    """Synthesize a direct route whose duration assumes ~30 km/h."""

    distance = distance_meters(origin, destination)
    duration = (distance / 1000) * settings.fallback_seconds_per_km
    if distance > 0:
        heading = compass_direction(bearing_degrees(origin, destination))
        instruction = f"Head {heading} straight to destination"
    else:
        instruction = "You are at the destination"
    return RouteResult(
        kind=RouteKind.ESTIMATED,
        origin=origin,
        destination=destination,
        geometry=(origin, destination),
        distance_meters=distance,
        duration_seconds=duration,
        steps=(RouteStep(instruction=instruction, distance_meters=distance, duration_seconds=duration),),
    )


class RouteResolver:
    """Owns the active route; the most recently issued request wins."""

    def __init__(self, client: GeoapifyClient | None = None) -> None:
        self._client = client or GeoapifyClient()
        self._active: RouteResult | None = None
        self._sequence = 0

    @property
    def active(self) -> RouteResult | None:
        return self._active

    async def resolve(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        """Resolve a driving route; never raises for routing failures."""

        self._sequence += 1
        request_id = self._sequence

        try:
            payload = await self._client.route(origin, destination)
            result = decode_route(payload, origin, destination)
            logger.info(
                f"Route resolved: {result.distance_meters / 1000:.2f} km, "
                f"{round(result.duration_seconds / 60)} min, {len(result.steps)} steps"
            )
        except RoutingError as exc:
            logger.warning(f"Routing failed ({type(exc).__name__}: {exc}); using straight-line estimate")
            result = estimate_route(origin, destination)

        if request_id == self._sequence:
            self._active = result
        else:
            logger.debug(f"Discarding stale route response {request_id} (latest is {self._sequence})")
        return result

    def clear(self) -> None:
        """Drop the active route and invalidate any request still in flight."""
        self._sequence += 1
        self._active = None

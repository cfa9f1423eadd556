"""HTTP client for the Geoapify routing API and decoding of its responses."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

import httpx

from ...config import settings
from ...models.domain import Coordinate, RouteKind, RouteResult, RouteStep
from .errors import MalformedResponse, NoRouteFound, ServiceUnreachable

logger = logging.getLogger(__name__)

ROUTING_PATH = "/v1/routing"
DEFAULT_STEP_INSTRUCTION = "Continue"


class GeoapifyClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        mode: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.geoapify_api_key
        self.base_url = (base_url or settings.geoapify_base_url).rstrip("/")
        self.mode = mode or settings.routing_mode
        self.timeout = timeout if timeout is not None else settings.routing_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.routing_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.routing_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            transport=self._transport,
        )

    def build_params(self, origin: Coordinate, destination: Coordinate) -> dict[str, str]:
        # Geoapify waypoints are "lat,lon" separated by "|".
        waypoints = "|".join(f"{point.latitude},{point.longitude}" for point in (origin, destination))
        return {"waypoints": waypoints, "mode": self.mode, "apiKey": self.api_key or ""}

    async def route(self, origin: Coordinate, destination: Coordinate) -> dict:
        """Request a route between two waypoints and return the raw feature collection.

        Raises ``ServiceUnreachable`` when no key is configured, the network
        fails, or the service answers with a non-success status, and
        ``MalformedResponse`` when the body is not a JSON object.
        """
        if not self.api_key:
            raise ServiceUnreachable("Geoapify API key is not configured.")

        url = f"{self.base_url}{ROUTING_PATH}"
        params = self.build_params(origin, destination)

        async with self._get_client() as client:
            attempt = 0
            while True:
                try:
                    response = await client.get(url, params=params)
                    response.raise_for_status()
                    break
                except httpx.HTTPStatusError as exc:
                    attempt += 1
                    if attempt > self.max_retries or exc.response.status_code < 500:
                        raise ServiceUnreachable(
                            f"Routing service answered HTTP {exc.response.status_code}"
                        ) from exc
                    logger.debug(f"Routing service error {exc.response.status_code}, retrying (attempt {attempt}/{self.max_retries})")
                except httpx.HTTPError as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ServiceUnreachable(
                            f"Failed to reach routing service at {self.base_url}: {exc}"
                        ) from exc
                    logger.debug(f"Routing network error, retrying (attempt {attempt}/{self.max_retries}): {exc}")
                await asyncio.sleep(self.backoff_seconds * attempt)

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponse("Routing response is not valid JSON") from exc
        if not isinstance(data, dict):
            raise MalformedResponse("Routing response is not a JSON object")
        return data


def service_time_to_seconds(value: Any) -> float:
    """Convert a Geoapify ``time`` value to seconds.

    Geoapify reports ``time`` in seconds already, so the value is used as is.
    """
    return float(value)


def transpose_lonlat(pairs: Sequence[Sequence[float]]) -> tuple[Coordinate, ...]:
    """Turn GeoJSON ``[lng, lat]`` pairs into latitude-first coordinates."""
    return tuple(Coordinate(latitude=float(pair[1]), longitude=float(pair[0])) for pair in pairs)


def _decode_geometry(geometry: dict) -> tuple[Coordinate, ...]:
    geometry_type = geometry.get("type")
    coordinates = geometry["coordinates"]
    if geometry_type == "MultiLineString":
        points: list[Coordinate] = []
        for line in coordinates:
            points.extend(transpose_lonlat(line))
        return tuple(points)
    if geometry_type == "LineString":
        return transpose_lonlat(coordinates)
    raise MalformedResponse(f"Unsupported route geometry type '{geometry_type}'")


def _decode_steps(properties: dict) -> tuple[RouteStep, ...]:
    legs = properties.get("legs") or []
    if not legs:
        return ()
    steps = []
    for step in legs[0].get("steps") or []:
        instruction = (step.get("instruction") or {}).get("text") or DEFAULT_STEP_INSTRUCTION
        steps.append(
            RouteStep(
                instruction=instruction,
                distance_meters=float(step.get("distance") or 0),
                duration_seconds=service_time_to_seconds(step.get("time") or 0),
            )
        )
    return tuple(steps)


def decode_route(payload: dict, origin: Coordinate, destination: Coordinate) -> RouteResult:
    """Decode the first feature of a routing response into a routed result."""

    features = payload.get("features")
    if features is None:
        raise MalformedResponse("Routing response has no 'features' member")
    if not features:
        raise NoRouteFound("Routing service returned zero route features")

    try:
        feature = features[0]
        geometry = _decode_geometry(feature["geometry"])
        properties = feature["properties"]
        distance = float(properties["distance"])
        duration = service_time_to_seconds(properties["time"])
        steps = _decode_steps(properties)
    except (KeyError, IndexError, TypeError, ValueError, AttributeError) as exc:
        raise MalformedResponse(f"Could not decode route feature: {exc!r}") from exc

    if len(geometry) < 2:
        raise MalformedResponse("Route geometry has fewer than two points")

    return RouteResult(
        kind=RouteKind.ROUTED,
        origin=origin,
        destination=destination,
        geometry=geometry,
        distance_meters=distance,
        duration_seconds=duration,
        steps=steps,
    )


async def check_health(client: GeoapifyClient | None = None) -> bool:
    """Check that the routing service answers a minimal route request."""
    client = client or GeoapifyClient()
    if not client.api_key:
        return False
    try:
        # Two points in central Mumbai.
        payload = await client.route(Coordinate(19.076, 72.8777), Coordinate(19.082, 72.8811))
        decode_route(payload, Coordinate(19.076, 72.8777), Coordinate(19.082, 72.8811))
        return True
    except (ServiceUnreachable, MalformedResponse, NoRouteFound) as exc:
        logger.info(f"Routing health check failed: {exc}")
        return False

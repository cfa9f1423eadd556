"""Per-session map state and the commands the map view sends to the core."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from ...config import settings
from ...models.domain import Coordinate, PositionSample, Practitioner, RouteResult
from ..discovery import FilterChoices, FilterCriteria, apply_filters, filter_choices, summarize
from ..location import LocationAcquirer
from ..routing.resolver import RouteResolver

logger = logging.getLogger(__name__)

USER_ZOOM = 13
OVERVIEW_ZOOM = 6


@dataclass(frozen=True, slots=True)
class ShowRouteRequest:
    origin: Coordinate
    destination: Coordinate
    practitioner_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RefreshLocationRequest:
    force_fresh: bool = True


MapCommand = Union[ShowRouteRequest, RefreshLocationRequest]


@dataclass(frozen=True, slots=True)
class MapSnapshot:
    """Everything the map view needs to render one frame."""

    practitioners: tuple[Practitioner, ...]
    filtered: tuple[Practitioner, ...]
    choices: FilterChoices
    counts: dict
    criteria: FilterCriteria
    position: Optional[PositionSample]
    route: Optional[RouteResult]
    route_practitioner_id: Optional[str]
    center: Coordinate
    zoom: int


class MapSession:
    """Wires the map view to the location acquirer and route resolver.

    The acquirer owns the position and the resolver owns the route; the
    session only holds the user's filter choices.
    """

    def __init__(self, acquirer: LocationAcquirer, resolver: RouteResolver) -> None:
        self.acquirer = acquirer
        self.resolver = resolver
        self._criteria = FilterCriteria()
        self._route_practitioner_id: Optional[str] = None

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def route_practitioner_id(self) -> Optional[str]:
        return self._route_practitioner_id if self.resolver.active is not None else None

    def update_filters(self, **changes) -> FilterCriteria:
        self._criteria = dataclasses.replace(self._criteria, **changes)
        return self._criteria

    def reset_filters(self) -> FilterCriteria:
        self._criteria = FilterCriteria()
        return self._criteria

    async def dispatch(self, command: MapCommand) -> PositionSample | RouteResult:
        if isinstance(command, ShowRouteRequest):
            result = await self.resolver.resolve(command.origin, command.destination)
            if self.resolver.active is result:
                self._route_practitioner_id = command.practitioner_id
            return result
        if isinstance(command, RefreshLocationRequest):
            return await self.acquirer.acquire(force_fresh=command.force_fresh)
        raise TypeError(f"Unsupported map command: {type(command).__name__}")

    async def show_route_to(self, practitioner: Practitioner) -> RouteResult:
        """Route from the current position to ``practitioner``."""

        position = self.acquirer.current
        if position is None:
            raise ValueError("Your location is required to show a route.")
        if practitioner.location is None:
            raise ValueError(f"Practitioner {practitioner.practitioner_id} has no location.")
        return await self.dispatch(
            ShowRouteRequest(
                origin=position.coordinate,
                destination=practitioner.location,
                practitioner_id=practitioner.practitioner_id,
            )
        )

    def clear_route(self) -> None:
        logger.debug(f"Clearing route to practitioner {self._route_practitioner_id}")
        self._route_practitioner_id = None
        self.resolver.clear()

    def snapshot(self, practitioners: Sequence[Practitioner]) -> MapSnapshot:
        position = self.acquirer.current
        filtered = apply_filters(practitioners, position, self._criteria)
        center, zoom = _map_view(position, filtered)
        route = self.resolver.active
        return MapSnapshot(
            practitioners=tuple(practitioners),
            filtered=tuple(filtered),
            choices=filter_choices(practitioners),
            counts=summarize(practitioners, filtered),
            criteria=self._criteria,
            position=position,
            route=route,
            route_practitioner_id=self.route_practitioner_id,
            center=center,
            zoom=zoom,
        )


def _map_view(position: Optional[PositionSample], practitioners: Sequence[Practitioner]) -> tuple[Coordinate, int]:
    if position is not None:
        return position.coordinate, USER_ZOOM
    for practitioner in practitioners:
        if practitioner.location is not None:
            return practitioner.location, OVERVIEW_ZOOM
    lat, lng = settings.default_map_center
    return Coordinate(latitude=lat, longitude=lng), OVERVIEW_ZOOM

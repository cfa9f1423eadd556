"""Map view snapshot schema."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from ..config import settings
from ..services.geospatial import distance_meters
from ..services.presentation import MapSnapshot
from .common import CoordinateModel
from .location import PositionSampleModel
from .practitioners import (
    FilterBoundsModel,
    FilterChoicesModel,
    FilterCriteriaModel,
    PractitionerModel,
)
from .routing import RouteModel


class MapSnapshotResponse(BaseModel):
    practitioners: List[PractitionerModel]
    total: int
    shown: int
    criteria: FilterCriteriaModel
    choices: FilterChoicesModel
    bounds: FilterBoundsModel
    position: Optional[PositionSampleModel] = None
    route: Optional[RouteModel] = None
    center: CoordinateModel
    zoom: int

    @classmethod
    def from_snapshot(cls, snapshot: MapSnapshot) -> "MapSnapshotResponse":
        position = snapshot.position
        items = []
        for practitioner in snapshot.filtered:
            distance = None
            if position is not None and practitioner.location is not None:
                distance = distance_meters(position.coordinate, practitioner.location)
            items.append(PractitionerModel.from_domain(practitioner, distance))

        criteria = snapshot.criteria
        return cls(
            practitioners=items,
            total=snapshot.counts["total"],
            shown=snapshot.counts["shown"],
            criteria=FilterCriteriaModel(
                radius_km=criteria.radius_km,
                specialty=criteria.specialty,
                city=criteria.city,
                min_experience_years=criteria.min_experience_years,
            ),
            choices=FilterChoicesModel(
                specialties=list(snapshot.choices.specialties),
                cities=list(snapshot.choices.cities),
            ),
            bounds=FilterBoundsModel(
                min_radius_km=settings.min_radius_km,
                max_radius_km=settings.max_radius_km,
                max_experience_years=settings.max_experience_filter_years,
            ),
            position=PositionSampleModel.from_domain(position) if position else None,
            route=RouteModel.from_domain(snapshot.route, snapshot.route_practitioner_id) if snapshot.route else None,
            center=CoordinateModel.from_domain(snapshot.center),
            zoom=snapshot.zoom,
        )

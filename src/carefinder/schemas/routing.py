"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from ..models.domain import RouteResult
from ..services.presentation import external_maps_link, format_distance, format_duration, route_label
from .common import CoordinateModel


class RouteRequest(BaseModel):
    """Route to explicit coordinates, or from the session position to a practitioner."""

    origin: Optional[CoordinateModel] = None
    destination: Optional[CoordinateModel] = None
    practitioner_id: Optional[str] = Field(default=None, description="Route to this practitioner's location.")

    @model_validator(mode="after")
    def _check_target(self) -> "RouteRequest":
        if self.practitioner_id is None and (self.origin is None or self.destination is None):
            raise ValueError("Provide either practitioner_id or both origin and destination.")
        return self


class RouteStepModel(BaseModel):
    instruction: str
    distance_meters: float
    duration_seconds: float
    distance_text: str
    duration_text: str


class RouteModel(BaseModel):
    kind: Literal["routed", "estimated"]
    label: str
    origin: CoordinateModel
    destination: CoordinateModel
    geometry: List[CoordinateModel]
    distance_meters: float
    duration_seconds: float
    distance_text: str
    duration_text: str
    steps: List[RouteStepModel]
    external_maps_url: str
    practitioner_id: Optional[str] = None

    @classmethod
    def from_domain(cls, route: RouteResult, practitioner_id: str | None = None) -> "RouteModel":
        return cls(
            kind=route.kind.value,
            label=route_label(route),
            origin=CoordinateModel.from_domain(route.origin),
            destination=CoordinateModel.from_domain(route.destination),
            geometry=[CoordinateModel.from_domain(point) for point in route.geometry],
            distance_meters=route.distance_meters,
            duration_seconds=route.duration_seconds,
            distance_text=format_distance(route.distance_meters),
            duration_text=format_duration(route.duration_seconds),
            steps=[
                RouteStepModel(
                    instruction=step.instruction,
                    distance_meters=step.distance_meters,
                    duration_seconds=step.duration_seconds,
                    distance_text=format_distance(step.distance_meters),
                    duration_text=format_duration(step.duration_seconds),
                )
                for step in route.steps
            ],
            external_maps_url=external_maps_link(route.origin, route.destination),
            practitioner_id=practitioner_id,
        )


class ActiveRouteResponse(BaseModel):
    route: Optional[RouteModel] = None

"""Domain models for practitioners, positions and routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A point in decimal degrees, latitude first."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range [-90, 90]: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range [-180, 180]: {self.longitude}")

    def as_pair(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class PositionFix:
    """Raw reading handed back by a positioning capability."""

    latitude: float
    longitude: float
    accuracy: float
    timestamp: int


@dataclass(frozen=True, slots=True)
class PositionSample:
    """Best-effort user position produced by the location acquirer."""

    coordinate: Coordinate
    accuracy_meters: float
    captured_at_epoch_ms: int
    low_accuracy_threshold_meters: float = 100.0
    poor_accuracy_threshold_meters: float = 200.0

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude

    @property
    def accuracy_level(self) -> str:
        if self.accuracy_meters > self.poor_accuracy_threshold_meters:
            return "poor"
        if self.accuracy_meters > self.low_accuracy_threshold_meters:
            return "low"
        return "high"

    @property
    def precision_warning(self) -> bool:
        """True when the sample is usable but too coarse to present as precise."""
        return self.accuracy_level != "high"


@dataclass(slots=True)
class Practitioner:
    """Read-only practitioner record as supplied by the practitioner source."""

    practitioner_id: str
    specialty: str
    city: str
    experience_years: int
    languages: tuple[str, ...] = ()
    location: Optional[Coordinate] = None
    verified: bool = False
    name: Optional[str] = None
    phone: Optional[str] = None


class RouteKind(str, Enum):
    ROUTED = "routed"
    ESTIMATED = "estimated"


@dataclass(frozen=True, slots=True)
class RouteStep:
    instruction: str
    distance_meters: float
    duration_seconds: float


@dataclass(frozen=True, slots=True)
class RouteResult:
    kind: RouteKind
    origin: Coordinate
    destination: Coordinate
    geometry: tuple[Coordinate, ...]
    distance_meters: float
    duration_seconds: float
    steps: tuple[RouteStep, ...] = field(default_factory=tuple)

    @property
    def is_estimated(self) -> bool:
        return self.kind is RouteKind.ESTIMATED

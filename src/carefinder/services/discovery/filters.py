"""Composable practitioner filters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ...config import settings
from ...models.domain import PositionSample, Practitioner
from ..geospatial import distance_meters

ALL = "all"


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    radius_km: float = field(default_factory=lambda: settings.default_radius_km)
    specialty: str = ALL
    city: str = ALL
    min_experience_years: int = 0

    def __post_init__(self) -> None:
        if self.radius_km <= 0:
            raise ValueError(f"Radius must be positive, got {self.radius_km}")
        if self.min_experience_years < 0:
            raise ValueError(f"Minimum experience cannot be negative, got {self.min_experience_years}")


@dataclass(frozen=True, slots=True)
class FilterChoices:
    specialties: tuple[str, ...]
    cities: tuple[str, ...]


def _within_radius(practitioner: Practitioner, position: PositionSample, radius_km: float) -> bool:
    if practitioner.location is None:
        return False
    return distance_meters(position.coordinate, practitioner.location) <= radius_km * 1000


def matches(
    practitioner: Practitioner,
    user_position: Optional[PositionSample],
    criteria: FilterCriteria,
) -> bool:
    """Return True when ``practitioner`` passes every active predicate."""

    if user_position is not None and not _within_radius(practitioner, user_position, criteria.radius_km):
        return False
    if criteria.specialty != ALL and practitioner.specialty != criteria.specialty:
        return False
    if criteria.city != ALL and practitioner.city != criteria.city:
        return False
    if criteria.min_experience_years > 0 and practitioner.experience_years < criteria.min_experience_years:
        return False
    return True


def apply_filters(
    practitioners: Iterable[Practitioner],
    user_position: Optional[PositionSample],
    criteria: FilterCriteria,
) -> list[Practitioner]:
    """Filter practitioners, preserving input order.

    The radius is ignored when there is no user position.
    """

    return [practitioner for practitioner in practitioners if matches(practitioner, user_position, criteria)]


def filter_choices(practitioners: Iterable[Practitioner]) -> FilterChoices:
    """Distinct sorted specialties and cities of the unfiltered pool."""

    pool = list(practitioners)
    return FilterChoices(
        specialties=tuple(sorted({p.specialty for p in pool if p.specialty})),
        cities=tuple(sorted({p.city for p in pool if p.city})),
    )


def summarize(practitioners: Sequence[Practitioner], filtered: Sequence[Practitioner]) -> dict:
    return {"total": len(practitioners), "shown": len(filtered)}

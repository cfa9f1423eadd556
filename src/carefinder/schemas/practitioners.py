"""Practitioner discovery schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import Practitioner
from .common import CoordinateModel


class PractitionerModel(BaseModel):
    id: str
    specialty: str
    city: str
    experience_years: int
    languages: List[str] = Field(default_factory=list)
    location: Optional[CoordinateModel] = None
    verified_badge: bool = False
    name: Optional[str] = None
    phone: Optional[str] = None
    distance_meters: Optional[float] = Field(
        default=None, description="Straight-line distance from the user when a position is known."
    )

    @classmethod
    def from_domain(cls, practitioner: Practitioner, distance_meters: float | None = None) -> "PractitionerModel":
        return cls(
            id=practitioner.practitioner_id,
            specialty=practitioner.specialty,
            city=practitioner.city,
            experience_years=practitioner.experience_years,
            languages=list(practitioner.languages),
            location=CoordinateModel.from_domain(practitioner.location) if practitioner.location else None,
            verified_badge=practitioner.verified,
            name=practitioner.name,
            phone=practitioner.phone,
            distance_meters=distance_meters,
        )


class FilterCriteriaModel(BaseModel):
    radius_km: float
    specialty: str
    city: str
    min_experience_years: int


class FilterUpdate(BaseModel):
    radius_km: Optional[float] = Field(default=None, gt=0)
    specialty: Optional[str] = None
    city: Optional[str] = None
    min_experience_years: Optional[int] = Field(default=None, ge=0)


class FilterChoicesModel(BaseModel):
    specialties: List[str]
    cities: List[str]


class FilterBoundsModel(BaseModel):
    min_radius_km: float
    max_radius_km: float
    max_experience_years: int


class PractitionerSearchResponse(BaseModel):
    items: List[PractitionerModel]
    total: int
    shown: int
    criteria: FilterCriteriaModel
    choices: FilterChoicesModel
    radius_applied: bool

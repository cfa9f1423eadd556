"""Practitioner discovery endpoints."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...data.practitioners_repository import load_practitioners
from ...models.domain import Coordinate, PositionSample
from ...schemas.map import MapSnapshotResponse
from ...schemas.practitioners import (
    FilterChoicesModel,
    FilterCriteriaModel,
    FilterUpdate,
    PractitionerModel,
    PractitionerSearchResponse,
)
from ...services.discovery import ALL, FilterCriteria, apply_filters, filter_choices, summarize
from ...services.geospatial import distance_meters
from ...services.presentation import MapSession
from ..deps import map_session

router = APIRouter(tags=["practitioners"])
logger = logging.getLogger(__name__)


def _practitioners():
    try:
        return load_practitioners()
    except (FileNotFoundError, ValueError) as exc:
        logger.exception(f"Failed to load practitioners: {exc}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Practitioner list unavailable: {exc}",
        ) from exc


@router.get("/practitioners", response_model=List[PractitionerModel], status_code=status.HTTP_200_OK)
def list_practitioners() -> List[PractitionerModel]:
    return [PractitionerModel.from_domain(practitioner) for practitioner in _practitioners()]


@router.post("/practitioners/refresh", status_code=status.HTTP_200_OK)
def refresh_practitioners() -> dict:
    """Drop the cached practitioner list so the next read hits the source again."""
    load_practitioners.cache_clear()
    return {"status": "ok", "practitioners": len(_practitioners())}


@router.get("/practitioners/search", response_model=PractitionerSearchResponse, status_code=status.HTTP_200_OK)
def search_practitioners(
    lat: float | None = Query(default=None, ge=-90, le=90, description="User latitude"),
    lng: float | None = Query(default=None, ge=-180, le=180, description="User longitude"),
    accuracy: float = Query(default=0.0, ge=0, description="Accuracy of the user position in meters"),
    radius_km: float | None = Query(default=None, gt=0, description="Search radius; ignored without lat/lng"),
    specialty: str = Query(default=ALL),
    city: str = Query(default=ALL),
    min_experience_years: int = Query(default=0, ge=0),
) -> PractitionerSearchResponse:
    if (lat is None) != (lng is None):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Provide both lat and lng, or neither.")

    position = None
    if lat is not None and lng is not None:
        position = PositionSample(
            coordinate=Coordinate(latitude=lat, longitude=lng),
            accuracy_meters=accuracy,
            captured_at_epoch_ms=0,
        )
    options = {"specialty": specialty, "city": city, "min_experience_years": min_experience_years}
    if radius_km is not None:
        options["radius_km"] = radius_km
    criteria = FilterCriteria(**options)

    practitioners = _practitioners()
    filtered = apply_filters(practitioners, position, criteria)
    choices = filter_choices(practitioners)
    counts = summarize(practitioners, filtered)

    items = []
    for practitioner in filtered:
        distance = None
        if position is not None and practitioner.location is not None:
            distance = distance_meters(position.coordinate, practitioner.location)
        items.append(PractitionerModel.from_domain(practitioner, distance))

    return PractitionerSearchResponse(
        items=items,
        total=counts["total"],
        shown=counts["shown"],
        criteria=FilterCriteriaModel(
            radius_km=criteria.radius_km,
            specialty=criteria.specialty,
            city=criteria.city,
            min_experience_years=criteria.min_experience_years,
        ),
        choices=FilterChoicesModel(specialties=list(choices.specialties), cities=list(choices.cities)),
        radius_applied=position is not None,
    )


@router.get("/map", response_model=MapSnapshotResponse, status_code=status.HTTP_200_OK)
async def get_map(session: MapSession = Depends(map_session)) -> MapSnapshotResponse:
    return MapSnapshotResponse.from_snapshot(session.snapshot(_practitioners()))


@router.patch("/map/filters", response_model=MapSnapshotResponse, status_code=status.HTTP_200_OK)
async def update_filters(payload: FilterUpdate, session: MapSession = Depends(map_session)) -> MapSnapshotResponse:
    changes = payload.model_dump(exclude_none=True)
    try:
        session.update_filters(**changes)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return MapSnapshotResponse.from_snapshot(session.snapshot(_practitioners()))


@router.post("/map/filters/reset", response_model=MapSnapshotResponse, status_code=status.HTTP_200_OK)
async def reset_filters(session: MapSession = Depends(map_session)) -> MapSnapshotResponse:
    session.reset_filters()
    return MapSnapshotResponse.from_snapshot(session.snapshot(_practitioners()))

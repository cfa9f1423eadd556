"""Routing endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...data.practitioners_repository import get_practitioner
from ...schemas.routing import ActiveRouteResponse, RouteModel, RouteRequest
from ...services.presentation import MapSession, ShowRouteRequest
from ..deps import map_session

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/resolve", response_model=RouteModel, status_code=status.HTTP_200_OK)
async def resolve_route(payload: RouteRequest, session: MapSession = Depends(map_session)) -> RouteModel:
    """Resolve a route; routing-service failures come back as an estimated route."""
    if payload.practitioner_id is not None:
        try:
            practitioner = get_practitioner(payload.practitioner_id)
        except LookupError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        try:
            route = await session.show_route_to(practitioner)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        return RouteModel.from_domain(route, practitioner.practitioner_id)

    route = await session.dispatch(
        ShowRouteRequest(origin=payload.origin.to_domain(), destination=payload.destination.to_domain())
    )
    return RouteModel.from_domain(route)


@router.get("/active", response_model=ActiveRouteResponse, status_code=status.HTTP_200_OK)
async def active_route(session: MapSession = Depends(map_session)) -> ActiveRouteResponse:
    route = session.resolver.active
    if route is None:
        return ActiveRouteResponse(route=None)
    return ActiveRouteResponse(route=RouteModel.from_domain(route, session.route_practitioner_id))


@router.delete("/active", response_model=ActiveRouteResponse, status_code=status.HTTP_200_OK)
async def clear_route(session: MapSession = Depends(map_session)) -> ActiveRouteResponse:
    session.clear_route()
    return ActiveRouteResponse(route=None)

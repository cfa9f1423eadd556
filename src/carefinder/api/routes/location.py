"""User location endpoints.

Session state is only touched from the event loop, so every route here is async.
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends, HTTPException, status

from ...models.domain import PositionFix
from ...schemas.location import (
    AcquireRequest,
    PendingRequestModel,
    PositionErrorReport,
    PositionReport,
    PositionSampleModel,
)
from ...services.location import (
    LocationError,
    LocationUnsupported,
    PermissionDenied,
    PositionTimeout,
    PositionUnavailable,
    ReportedPositionProvider,
    error_from_code,
)
from ...services.presentation import MapSession, RefreshLocationRequest, registry
from ..deps import map_session, session_id

router = APIRouter(prefix="/location", tags=["location"])

STATUS_BY_ERROR: dict[type[LocationError], int] = {
    PermissionDenied: status.HTTP_403_FORBIDDEN,
    PositionUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    PositionTimeout: status.HTTP_504_GATEWAY_TIMEOUT,
    LocationUnsupported: status.HTTP_501_NOT_IMPLEMENTED,
}


def _provider(sid: str) -> ReportedPositionProvider:
    provider = registry.provider(sid)
    if provider is None:
        raise HTTPException(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail=LocationUnsupported().to_dict(),
        )
    return provider


@router.post("/reports", status_code=status.HTTP_202_ACCEPTED)
async def report_position(payload: PositionReport, sid: str = Depends(session_id)) -> dict:
    """Accept a fix from the user's device."""
    timestamp = payload.timestamp if payload.timestamp is not None else int(time.time() * 1000)
    _provider(sid).report(
        PositionFix(
            latitude=payload.latitude,
            longitude=payload.longitude,
            accuracy=payload.accuracy,
            timestamp=timestamp,
        )
    )
    return {"accepted": True, "timestamp": timestamp}


@router.post("/errors", status_code=status.HTTP_202_ACCEPTED)
async def report_position_error(payload: PositionErrorReport, sid: str = Depends(session_id)) -> dict:
    """Accept a positioning failure from the user's device."""
    _provider(sid).report_error(error_from_code(payload.code, payload.message))
    return {"accepted": True}


@router.get("/pending", response_model=PendingRequestModel, status_code=status.HTTP_200_OK)
async def pending_request(sid: str = Depends(session_id)) -> PendingRequestModel:
    """Tell the device whether a position is wanted and at which accuracy."""
    options = _provider(sid).pending()
    if options is None:
        return PendingRequestModel(pending=False)
    return PendingRequestModel(
        pending=True,
        enable_high_accuracy=options.enable_high_accuracy,
        timeout_seconds=options.timeout_seconds,
        maximum_age_seconds=options.maximum_age_seconds,
    )


@router.post("/acquire", response_model=PositionSampleModel, status_code=status.HTTP_200_OK)
async def acquire_position(
    payload: AcquireRequest | None = None,
    session: MapSession = Depends(map_session),
) -> PositionSampleModel:
    force_fresh = payload.force_fresh if payload else False
    try:
        sample = await session.dispatch(RefreshLocationRequest(force_fresh=force_fresh))
    except LocationError as exc:
        raise HTTPException(
            status_code=STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR),
            detail=exc.to_dict(),
        ) from exc
    return PositionSampleModel.from_domain(sample)


@router.get("/current", response_model=PositionSampleModel | None, status_code=status.HTTP_200_OK)
async def current_position(session: MapSession = Depends(map_session)) -> PositionSampleModel | None:
    sample = session.acquirer.current
    return PositionSampleModel.from_domain(sample) if sample else None

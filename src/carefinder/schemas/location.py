"""Location request/response schemas."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import PositionSample
from .common import CoordinateModel


class PositionReport(BaseModel):
    """A fix reported by the user's device."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: float = Field(..., ge=0, description="Accuracy radius in meters.")
    timestamp: Optional[int] = Field(default=None, description="Epoch milliseconds; defaults to receipt time.")


class PositionErrorReport(BaseModel):
    code: Literal["permission_denied", "position_unavailable", "timeout", "unsupported"]
    message: Optional[str] = None


class AcquireRequest(BaseModel):
    force_fresh: bool = False


class PendingRequestModel(BaseModel):
    pending: bool
    enable_high_accuracy: Optional[bool] = None
    timeout_seconds: Optional[float] = None
    maximum_age_seconds: Optional[float] = None


class PositionSampleModel(BaseModel):
    location: CoordinateModel
    accuracy_meters: float
    captured_at_epoch_ms: int
    accuracy_level: Literal["high", "low", "poor"]
    precision_warning: bool
    message: Optional[str] = None

    @classmethod
    def from_domain(cls, sample: PositionSample) -> "PositionSampleModel":
        message = None
        if sample.precision_warning:
            message = (
                f"Accuracy is {round(sample.accuracy_meters)}m. "
                "For better results, move to an open area with clear sky view."
            )
        return cls(
            location=CoordinateModel.from_domain(sample.coordinate),
            accuracy_meters=sample.accuracy_meters,
            captured_at_epoch_ms=sample.captured_at_epoch_ms,
            accuracy_level=sample.accuracy_level,
            precision_warning=sample.precision_warning,
            message=message,
        )

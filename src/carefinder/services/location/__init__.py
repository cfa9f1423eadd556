"""User position acquisition."""

from .acquirer import LocationAcquirer
from .errors import (
    LocationError,
    LocationUnsupported,
    PermissionDenied,
    PositionTimeout,
    PositionUnavailable,
    error_from_code,
)
from .providers import PositionOptions, PositionProvider, ReportedPositionProvider

__all__ = [
    "LocationAcquirer",
    "LocationError",
    "LocationUnsupported",
    "PermissionDenied",
    "PositionTimeout",
    "PositionUnavailable",
    "error_from_code",
    "PositionOptions",
    "PositionProvider",
    "ReportedPositionProvider",
]

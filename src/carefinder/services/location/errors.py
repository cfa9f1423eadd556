"""Failure kinds raised while acquiring the user's position."""

from __future__ import annotations


class LocationError(Exception):
    """Base class for location failures; each kind carries user-facing guidance."""

    code = "location_error"
    message = "Failed to get your location."
    guidance = "Please try again later."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(detail or self.message)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "guidance": self.guidance,
            "detail": self.detail,
        }


class PermissionDenied(LocationError):
    code = "permission_denied"
    message = "Location permission was refused."
    guidance = "Please enable location permissions in your browser settings (site settings, then Location, then Allow)."


class PositionUnavailable(LocationError):
    code = "position_unavailable"
    message = "Location information is unavailable."
    guidance = "Make sure GPS/Location Services are enabled on your device."


class PositionTimeout(LocationError):
    code = "timeout"
    message = "Location request timed out."
    guidance = "Go outdoors or near a window for a clearer view of the sky, then try again."


class LocationUnsupported(LocationError):
    code = "unsupported"
    message = "Geolocation is not supported on this device."
    guidance = "Please use a modern browser like Chrome, Firefox, or Safari."


ERRORS_BY_CODE: dict[str, type[LocationError]] = {
    error.code: error
    for error in (PermissionDenied, PositionUnavailable, PositionTimeout, LocationUnsupported)
}


def error_from_code(code: str, detail: str | None = None) -> LocationError:
    """Build the error for a device-reported failure code."""
    try:
        return ERRORS_BY_CODE[code](detail)
    except KeyError:
        raise ValueError(f"Unknown location error code '{code}'") from None

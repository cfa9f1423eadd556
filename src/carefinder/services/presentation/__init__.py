"""Map view contract: session state, commands and display helpers."""

from .formatting import external_maps_link, format_distance, format_duration, route_label
from .map_session import MapCommand, MapSession, MapSnapshot, RefreshLocationRequest, ShowRouteRequest
from .registry import DEFAULT_SESSION_ID, SessionRegistry, registry

__all__ = [
    "external_maps_link",
    "format_distance",
    "format_duration",
    "route_label",
    "MapCommand",
    "MapSession",
    "MapSnapshot",
    "RefreshLocationRequest",
    "ShowRouteRequest",
    "DEFAULT_SESSION_ID",
    "SessionRegistry",
    "registry",
]

"""Route group exports."""

from . import health, location, practitioners, routes

__all__ = ["health", "location", "practitioners", "routes"]

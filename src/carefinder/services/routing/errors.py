"""Routing service failure kinds.

All three end in the same straight-line estimate; they stay distinct for logs.
"""


class RoutingError(Exception):
    pass


class ServiceUnreachable(RoutingError):
    """No key configured, network failure, or a non-success HTTP status."""


class MalformedResponse(RoutingError):
    """The service answered but the payload could not be decoded."""


class NoRouteFound(RoutingError):
    """The service answered with zero route features."""

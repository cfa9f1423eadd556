import asyncio

import pytest

from carefinder.models.domain import Coordinate, RouteKind
from carefinder.services.geospatial import distance_meters
from carefinder.services.routing.errors import MalformedResponse, ServiceUnreachable
from carefinder.services.routing.resolver import RouteResolver, estimate_route

A = Coordinate(19.08, 72.88)
B = Coordinate(19.07, 72.87)
C = Coordinate(19.2, 72.95)


def _payload(origin: Coordinate, destination: Coordinate, seconds: float = 930, meters: float = 12000) -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {
                    "type": "MultiLineString",
                    "coordinates": [
                        [[origin.longitude, origin.latitude], [destination.longitude, destination.latitude]]
                    ],
                },
                "properties": {"distance": meters, "time": seconds, "legs": [{"steps": []}]},
            }
        ],
    }


class StaticClient:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = 0

    async def route(self, origin, destination):
        self.calls += 1
        if isinstance(self.outcome, Exception):
            raise self.outcome
        if self.outcome is None:
            return _payload(origin, destination)
        return self.outcome


class GatedClient:
    """Holds each request until the test releases its destination."""

    def __init__(self):
        self.gates: dict[Coordinate, asyncio.Event] = {}

    async def route(self, origin, destination):
        gate = self.gates.setdefault(destination, asyncio.Event())
        await gate.wait()
        return _payload(origin, destination)

    def release(self, destination):
        self.gates.setdefault(destination, asyncio.Event()).set()


def _assert_estimated(route, origin, destination):
    expected_distance = distance_meters(origin, destination)
    assert route.kind is RouteKind.ESTIMATED
    assert route.is_estimated
    assert route.geometry == (origin, destination)
    assert route.distance_meters == expected_distance
    assert route.duration_seconds == (expected_distance / 1000) * 120
    assert len(route.steps) == 1
    assert route.steps[0].distance_meters == expected_distance
    assert "straight to destination" in route.steps[0].instruction


def test_routed_result_becomes_active():
    resolver = RouteResolver(StaticClient(None))

    route = asyncio.run(resolver.resolve(A, B))

    assert route.kind is RouteKind.ROUTED
    assert route.duration_seconds == 930
    assert route.distance_meters == 12000
    assert resolver.active is route


@pytest.mark.parametrize(
    "outcome",
    [
        ServiceUnreachable("connection refused"),
        MalformedResponse("bad body"),
        {"type": "FeatureCollection", "features": []},
        {"unexpected": True},
    ],
)
def test_failures_fall_back_to_estimate(outcome):
    resolver = RouteResolver(StaticClient(outcome))

    route = asyncio.run(resolver.resolve(A, C))

    _assert_estimated(route, A, C)
    assert resolver.active is route


def test_estimate_describes_direct_heading():
    route = estimate_route(Coordinate(0.0, 0.0), Coordinate(1.0, 0.0))

    assert route.steps[0].instruction == "Head north straight to destination"


def test_estimate_for_same_point_is_zero():
    route = estimate_route(A, A)

    assert route.distance_meters == 0
    assert route.duration_seconds == 0
    assert route.steps[0].instruction == "You are at the destination"


def test_no_route_before_first_request():
    assert RouteResolver(StaticClient(None)).active is None


def test_clear_removes_active_route_without_request():
    client = StaticClient(None)
    resolver = RouteResolver(client)
    asyncio.run(resolver.resolve(A, B))

    resolver.clear()

    assert resolver.active is None
    assert client.calls == 1


def test_each_resolve_replaces_active_route():
    async def scenario():
        resolver = RouteResolver(StaticClient(None))
        await resolver.resolve(A, B)
        second = await resolver.resolve(A, C)
        return resolver, second

    resolver, second = asyncio.run(scenario())

    assert resolver.active is second
    assert resolver.active.destination == C


def test_last_request_wins_when_earlier_response_arrives_late():
    async def scenario():
        client = GatedClient()
        resolver = RouteResolver(client)
        to_b = asyncio.ensure_future(resolver.resolve(A, B))
        to_c = asyncio.ensure_future(resolver.resolve(A, C))
        await asyncio.sleep(0)
        client.release(C)
        route_c = await to_c
        client.release(B)
        route_b = await to_b
        return resolver, route_b, route_c

    resolver, route_b, route_c = asyncio.run(scenario())

    assert resolver.active is route_c
    assert resolver.active.destination == C
    # The superseded caller still gets its own answer.
    assert route_b.destination == B


def test_last_request_wins_when_responses_arrive_in_order():
    async def scenario():
        client = GatedClient()
        resolver = RouteResolver(client)
        to_b = asyncio.ensure_future(resolver.resolve(A, B))
        to_c = asyncio.ensure_future(resolver.resolve(A, C))
        await asyncio.sleep(0)
        client.release(B)
        await to_b
        client.release(C)
        await to_c
        return resolver

    resolver = asyncio.run(scenario())

    assert resolver.active.destination == C


def test_clear_discards_in_flight_response():
    async def scenario():
        client = GatedClient()
        resolver = RouteResolver(client)
        pending = asyncio.ensure_future(resolver.resolve(A, B))
        await asyncio.sleep(0)
        resolver.clear()
        client.release(B)
        await pending
        return resolver

    resolver = asyncio.run(scenario())

    assert resolver.active is None

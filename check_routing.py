#!/usr/bin/env python3
"""Manual check that the Geoapify routing service answers and decodes as expected."""

import asyncio
import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from carefinder.config import settings
from carefinder.models.domain import Coordinate
from carefinder.services.routing.errors import RoutingError
from carefinder.services.routing.geoapify_client import GeoapifyClient, decode_route
from carefinder.services.routing.resolver import estimate_route


async def main() -> int:
    print("=" * 60)
    print("Routing Service Connection Test")
    print("=" * 60)
    print()

    print("1. Checking routing configuration...")
    if not settings.geoapify_api_key:
        print("   [ERROR] Geoapify API key is not configured")
        print("   Please set CAREFINDER_GEOAPIFY_API_KEY in your .env file")
        print("   Without it every route is returned as a straight-line estimate.")
        return 1
    print(f"   [OK] Base URL: {settings.geoapify_base_url}")
    print(f"   [OK] Mode: {settings.routing_mode}")
    print()

    # Gateway of India to Chhatrapati Shivaji Terminus, Mumbai
    origin = Coordinate(18.9220, 72.8347)
    destination = Coordinate(18.9398, 72.8355)

    print("2. Requesting a route...")
    try:
        payload = await GeoapifyClient().route(origin, destination)
        route = decode_route(payload, origin, destination)
    except RoutingError as e:
        print(f"   [ERROR] {type(e).__name__}: {e}")
        return 1
    print(f"   [OK] {len(route.geometry)} geometry points, {len(route.steps)} steps")
    print(f"   [OK] Distance: {route.distance_meters:.0f} meters")
    print(f"   [OK] Duration: {route.duration_seconds:.0f} seconds ({route.duration_seconds / 60:.1f} min)")
    print()

    print("3. Sanity-checking units against the straight-line estimate...")
    estimate = estimate_route(origin, destination)
    ratio = route.duration_seconds / estimate.duration_seconds if estimate.duration_seconds else 0
    print(f"   Estimated: {estimate.duration_seconds:.0f} seconds, routed/estimated ratio {ratio:.2f}")
    if ratio < 0.01 or ratio > 100:
        print("   [ERROR] Routed duration is orders of magnitude off; check the service's time unit")
        return 1
    print("   [OK] Durations are in the same unit")
    print()

    print("=" * 60)
    print("[SUCCESS] Routing service is connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

import asyncio
import json
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from carefinder.config import settings
from carefinder.data import practitioners_repository
from carefinder.main import create_app
from carefinder.services.presentation import registry
from carefinder.services.routing.geoapify_client import GeoapifyClient

PRACTITIONERS = [
    {
        "id": "near",
        "specialty": "Cardiology",
        "city": "Mumbai",
        "experience_years": 12,
        "languages": ["English"],
        "location": {"lat": 19.07, "lng": 72.87},
        "verified_badge": True,
        "user": {"name": "Dr. Near", "phone": "+91 22 5550 0101"},
    },
    {
        "id": "nowhere",
        "specialty": "Dermatology",
        "city": "Mumbai",
        "experience_years": 5,
        "location": None,
        "verified_badge": True,
    },
    {
        "id": "far",
        "specialty": "Pediatrics",
        "city": "Delhi",
        "experience_years": 9,
        "location": {"lat": 28.61, "lng": 77.21},
        "verified_badge": True,
    },
]

ROUTE_PAYLOAD = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "geometry": {"type": "LineString", "coordinates": [[72.88, 19.08], [72.87, 19.07]]},
            "properties": {
                "distance": 1800,
                "time": 300,
                "legs": [{"steps": [{"distance": 1800, "time": 300, "instruction": {"text": "Drive south."}}]}],
            },
        }
    ],
}


@pytest.fixture(autouse=True)
def clear_state():
    practitioners_repository.load_practitioners.cache_clear()
    registry.clear()
    yield
    practitioners_repository.load_practitioners.cache_clear()
    registry.clear()


@pytest.fixture
def api_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "practitioners.json"
    path.write_text(json.dumps(PRACTITIONERS), encoding="utf-8")
    monkeypatch.setattr(settings, "practitioners_file", path)
    monkeypatch.setattr(settings, "geoapify_api_key", None)
    monkeypatch.setattr(practitioners_repository, "get_supabase_client", lambda: None)

    with TestClient(create_app()) as client:
        yield client


def _report_home(client: TestClient, accuracy: float = 12.0) -> None:
    response = client.post("/api/location/reports", json={"latitude": 19.08, "longitude": 72.88, "accuracy": accuracy})
    assert response.status_code == 202


def test_health_endpoints(api_client: TestClient) -> None:
    assert api_client.get("/api/health").json() == {"status": "ok"}

    routing = api_client.get("/api/health/routing").json()
    assert routing["configured"] is False
    assert routing["mode"] == "estimated"

    database = api_client.get("/api/health/database").json()
    assert database["configured"] is False


def test_root_reports_routing_mode(api_client: TestClient) -> None:
    body = api_client.get("/").json()

    assert body["status"] == "running"
    assert body["routing"] == "estimated"


def test_list_practitioners(api_client: TestClient) -> None:
    body = api_client.get("/api/practitioners").json()

    assert [item["id"] for item in body] == ["near", "nowhere", "far"]
    assert body[0]["location"] == {"lat": 19.07, "lng": 72.87}
    assert body[1]["location"] is None


def test_search_with_position_applies_radius(api_client: TestClient) -> None:
    response = api_client.get("/api/practitioners/search", params={"lat": 19.08, "lng": 72.88, "radius_km": 50})

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["items"]] == ["near"]
    assert body["total"] == 3
    assert body["shown"] == 1
    assert body["radius_applied"] is True
    assert body["items"][0]["distance_meters"] == pytest.approx(1500, rel=0.1)


def test_search_without_position_ignores_radius(api_client: TestClient) -> None:
    body = api_client.get("/api/practitioners/search", params={"radius_km": 5, "city": "Mumbai"}).json()

    assert [item["id"] for item in body["items"]] == ["near", "nowhere"]
    assert body["radius_applied"] is False
    assert body["choices"]["cities"] == ["Delhi", "Mumbai"]


def test_search_requires_both_coordinates(api_client: TestClient) -> None:
    response = api_client.get("/api/practitioners/search", params={"lat": 19.08})

    assert response.status_code == 400


def test_missing_practitioner_file_is_unavailable(
    api_client: TestClient, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "practitioners_file", tmp_path / "missing.json")

    assert api_client.get("/api/practitioners").status_code == 503


def test_map_snapshot_before_location(api_client: TestClient) -> None:
    body = api_client.get("/api/map").json()

    assert body["shown"] == 3
    assert body["position"] is None
    assert body["route"] is None
    assert body["center"] == {"lat": 19.07, "lng": 72.87}
    assert body["zoom"] == 6
    assert body["bounds"] == {"min_radius_km": 5.0, "max_radius_km": 100.0, "max_experience_years": 30}


def test_reported_fix_is_acquired_and_centers_map(api_client: TestClient) -> None:
    _report_home(api_client, accuracy=150.0)

    response = api_client.post("/api/location/acquire")

    assert response.status_code == 200
    sample = response.json()
    assert sample["location"] == {"lat": 19.08, "lng": 72.88}
    assert sample["accuracy_level"] == "low"
    assert sample["precision_warning"] is True
    assert "150m" in sample["message"]

    snapshot = api_client.get("/api/map").json()
    assert snapshot["center"] == {"lat": 19.08, "lng": 72.88}
    assert snapshot["zoom"] == 13
    assert [item["id"] for item in snapshot["practitioners"]] == ["near"]
    assert api_client.get("/api/location/current").json()["accuracy_meters"] == 150.0


def test_acquire_times_out_without_device(api_client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "location_timeout_seconds", 0.01)
    monkeypatch.setattr(settings, "location_fallback_timeout_seconds", 0.01)

    response = api_client.post("/api/location/acquire", json={"force_fresh": True})

    assert response.status_code == 504
    assert response.json()["detail"]["code"] == "timeout"
    assert api_client.get("/api/location/pending").json() == {
        "pending": False,
        "enable_high_accuracy": None,
        "timeout_seconds": None,
        "maximum_age_seconds": None,
    }


def test_unsupported_when_sessions_have_no_provider(api_client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(registry, "_provider_factory", None)

    acquire = api_client.post("/api/location/acquire")
    report = api_client.post("/api/location/reports", json={"latitude": 1.0, "longitude": 1.0, "accuracy": 5.0})

    assert acquire.status_code == 501
    assert acquire.json()["detail"]["code"] == "unsupported"
    assert report.status_code == 501


def test_route_to_practitioner_falls_back_to_estimate(api_client: TestClient) -> None:
    _report_home(api_client)
    api_client.post("/api/location/acquire")

    response = api_client.post("/api/routes/resolve", json={"practitioner_id": "near"})

    assert response.status_code == 200
    route = response.json()
    assert route["kind"] == "estimated"
    assert route["label"] == "Estimated (offline mode)"
    assert route["practitioner_id"] == "near"
    assert route["duration_seconds"] == pytest.approx(route["distance_meters"] / 1000 * 120)
    assert len(route["geometry"]) == 2
    assert route["external_maps_url"] == (
        "https://www.google.com/maps/dir/?api=1&origin=19.08,72.88&destination=19.07,72.87&travelmode=driving"
    )

    active = api_client.get("/api/routes/active").json()
    assert active["route"]["practitioner_id"] == "near"

    assert api_client.delete("/api/routes/active").json() == {"route": None}
    assert api_client.get("/api/routes/active").json() == {"route": None}


def test_route_to_practitioner_needs_position(api_client: TestClient) -> None:
    response = api_client.post("/api/routes/resolve", json={"practitioner_id": "near"})

    assert response.status_code == 400


def test_route_to_practitioner_without_location(api_client: TestClient) -> None:
    _report_home(api_client)
    api_client.post("/api/location/acquire")

    response = api_client.post("/api/routes/resolve", json={"practitioner_id": "nowhere"})

    assert response.status_code == 400


def test_route_to_unknown_practitioner(api_client: TestClient) -> None:
    response = api_client.post("/api/routes/resolve", json={"practitioner_id": "ghost"})

    assert response.status_code == 404


def test_route_request_needs_target(api_client: TestClient) -> None:
    response = api_client.post("/api/routes/resolve", json={"origin": {"lat": 19.08, "lng": 72.88}})

    assert response.status_code == 422


def test_route_between_coordinates_uses_routing_service(
    api_client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=ROUTE_PAYLOAD)

    monkeypatch.setattr(
        registry,
        "_client_factory",
        lambda: GeoapifyClient(api_key="test-key", base_url="https://routing.test", transport=httpx.MockTransport(handler)),
    )

    response = api_client.post(
        "/api/routes/resolve",
        json={"origin": {"lat": 19.08, "lng": 72.88}, "destination": {"lat": 19.07, "lng": 72.87}},
    )

    route = response.json()
    assert route["kind"] == "routed"
    assert route["duration_seconds"] == 300
    assert route["duration_text"] == "5 min"
    assert route["distance_text"] == "1.80 km"
    assert route["steps"][0]["instruction"] == "Drive south."


def test_sessions_are_isolated(api_client: TestClient) -> None:
    api_client.patch("/api/map/filters", json={"city": "Delhi"}, headers={"X-Session-Id": "a"})

    other = api_client.get("/api/map", headers={"X-Session-Id": "b"}).json()

    assert other["criteria"]["city"] == "all"


def test_update_and_reset_filters(api_client: TestClient) -> None:
    updated = api_client.patch("/api/map/filters", json={"specialty": "Pediatrics"}).json()
    assert [item["id"] for item in updated["practitioners"]] == ["far"]
    assert updated["criteria"]["specialty"] == "Pediatrics"
    assert updated["choices"]["specialties"] == ["Cardiology", "Dermatology", "Pediatrics"]

    assert api_client.patch("/api/map/filters", json={"radius_km": 0}).status_code == 422

    reset = api_client.post("/api/map/filters/reset").json()
    assert reset["criteria"] == {"radius_km": 50.0, "specialty": "all", "city": "all", "min_experience_years": 0}
    assert reset["shown"] == 3


def test_refresh_reloads_source(api_client: TestClient) -> None:
    assert len(api_client.get("/api/practitioners").json()) == 3
    settings.practitioners_file.write_text(json.dumps(PRACTITIONERS[:1]), encoding="utf-8")

    assert len(api_client.get("/api/practitioners").json()) == 3
    assert api_client.post("/api/practitioners/refresh").json() == {"status": "ok", "practitioners": 1}


def test_device_answers_pending_request_while_acquire_waits() -> None:
    async def scenario():
        transport = httpx.ASGITransport(app=create_app())
        async with httpx.AsyncClient(transport=transport, base_url="http://carefinder.test") as client:
            acquire = asyncio.ensure_future(client.post("/api/location/acquire", json={"force_fresh": True}))
            pending = {"pending": False}
            for _ in range(200):
                pending = (await client.get("/api/location/pending")).json()
                if pending["pending"]:
                    break
                await asyncio.sleep(0.01)
            report = await client.post(
                "/api/location/reports",
                json={"latitude": 19.08, "longitude": 72.88, "accuracy": 20.0},
            )
            acquired = await acquire
            after = (await client.get("/api/location/pending")).json()
        return pending, report, acquired, after

    pending, report, acquired, after = asyncio.run(scenario())

    assert pending["pending"] is True
    assert pending["enable_high_accuracy"] is True
    assert pending["maximum_age_seconds"] == 0.0
    assert report.status_code == 202
    assert acquired.status_code == 200
    assert acquired.json()["location"] == {"lat": 19.08, "lng": 72.88}
    assert after["pending"] is False


def test_device_error_fails_waiting_acquire() -> None:
    async def scenario():
        transport = httpx.ASGITransport(app=create_app())
        async with httpx.AsyncClient(transport=transport, base_url="http://carefinder.test") as client:
            acquire = asyncio.ensure_future(client.post("/api/location/acquire"))
            for _ in range(200):
                if (await client.get("/api/location/pending")).json()["pending"]:
                    break
                await asyncio.sleep(0.01)
            error = await client.post("/api/location/errors", json={"code": "permission_denied"})
            return error, await acquire

    error, acquired = asyncio.run(scenario())

    assert error.status_code == 202
    assert acquired.status_code == 403
    assert acquired.json()["detail"]["code"] == "permission_denied"

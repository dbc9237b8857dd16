import runpy

import httpx
import pytest
import uvicorn

from app.dependencies import get_traffic_service
from app.services.optimization_engine.google_routes_client import GoogleRoutesClient
from app.services.optimization_engine.tomtom_client import TomTomClient
from app.services.traffic import TrafficService
from main import app


def stop_payload(stop_id, **extra):
    payload = {"id": stop_id, "name": f"Stop {stop_id}", "lat": 40.35, "lng": -74.66}
    payload.update(extra)
    return payload


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.text == "Snailtrail API"


def test_optimize_single_stop(client):
    r = client.post("/api/optimize", json={"stops": [stop_payload("a")], "startTime": "08:00"})
    assert r.status_code == 200, r.text
    out = r.json()

    assert out["optimizedRoute"] == [{
        "id": "a",
        "name": "Stop a",
        "order": 1,
        "arrivalTime": "08:00",
        "departureTime": "08:30",
        "travelTimeFromPrevious": 0,
    }]
    assert out["feasible"] is True
    assert out["estimatedEndTime"] == "08:30"
    assert "warnings" not in out
    assert "returnToHomeTime" not in out


def test_optimize_with_home_base_and_windows(client):
    body = {
        "stops": [
            stop_payload("a", timeWindow={"open": "09:00", "close": "12:00"}),
            stop_payload("b", priority="high", duration=45),
        ],
        "startTime": "08:00",
        "homeBase": {"lat": 40.3, "lng": -74.6, "address": "1 Depot Rd"},
        "returnHome": True,
    }
    r = client.post("/api/optimize", json=body)
    assert r.status_code == 200, r.text
    out = r.json()

    assert [s["id"] for s in out["optimizedRoute"]] == ["b", "a"]
    assert out["returnToHomeTime"] == 20
    assert out["totalDriveTime"] == 60
    assert out["totalServiceTime"] == 75


def test_optimize_reports_late_stop(client):
    body = {"stops": [stop_payload("late", timeWindow={"open": "06:00", "close": "07:00"})]}
    out = client.post("/api/optimize", json=body).json()

    assert out["feasible"] is False
    assert out["warnings"] == ["Cannot reach Stop late before close time"]
    assert len(out["optimizedRoute"]) == 1


def test_optimize_rejects_empty_stops(client):
    r = client.post("/api/optimize", json={"stops": []})
    assert r.status_code == 400
    assert r.json()["detail"] == "Missing or empty stops array"


def test_optimize_rejects_duplicate_ids(client):
    r = client.post("/api/optimize", json={"stops": [stop_payload("a"), stop_payload("a")]})
    assert r.status_code == 400
    assert "a" in r.json()["detail"]


@pytest.mark.parametrize("reserved_id", ["__home__", "__start__"])
def test_optimize_rejects_reserved_stop_ids(client, reserved_id):
    body = {
        "stops": [stop_payload(reserved_id), stop_payload("b")],
        "homeBase": {"lat": 40.3, "lng": -74.6},
        "startLocation": {"lat": 40.31, "lng": -74.61},
    }
    r = client.post("/api/optimize", json=body)
    assert r.status_code == 400
    assert r.json()["detail"] == f"Reserved stop ids: {reserved_id}"


@pytest.mark.parametrize("body", [
    {"stops": [stop_payload("a")], "startTime": "25:00"},
    {"stops": [stop_payload("")]},
    {"stops": [stop_payload("a", name="")]},
    {"stops": [stop_payload("a", lat=200)]},
    {"stops": [stop_payload("a", lng="east")]},
    {"stops": [stop_payload("a", priority="urgent")]},
    {"stops": [stop_payload("a", duration=-5)]},
    {"stops": [stop_payload("a", timeWindow={"open": "9am", "close": "10:00"})]},
])
def test_optimize_rejects_malformed_input(client, body):
    assert client.post("/api/optimize", json=body).status_code == 422


def google_ok(request):
    return httpx.Response(200, json={"routes": [{"duration": "1500s", "staticDuration": "1200s", "distanceMeters": 20000}]})


def tomtom_ok(request):
    return httpx.Response(200, json={"flowSegmentData": {"freeFlowTravelTime": 100, "currentTravelTime": 140, "confidence": 0.9}})


def failing(request):
    return httpx.Response(503, text="unavailable")


def use_traffic_service(google_handler=None, tomtom_handler=None):
    google = GoogleRoutesClient(
        api_key="g-key" if google_handler else "",
        transport=httpx.MockTransport(google_handler or failing),
    )
    tomtom = TomTomClient(
        api_key="t-key" if tomtom_handler else "",
        transport=httpx.MockTransport(tomtom_handler or failing),
    )
    app.dependency_overrides[get_traffic_service] = lambda: TrafficService(google, tomtom)


TRIP = {"origin": "40.3573,-74.6672", "destination": "40.2206,-74.7597"}


def test_traffic_requires_origin_and_destination(client):
    r = client.get("/api/traffic", params={"origin": "40.3573,-74.6672"})
    assert r.status_code == 400


def test_traffic_rejects_bad_coordinates(client):
    use_traffic_service(google_handler=google_ok)
    r = client.get("/api/traffic", params={"origin": "princeton", "destination": "40.2,-74.7"})
    assert r.status_code == 400


def test_traffic_prefers_google(client):
    use_traffic_service(google_handler=google_ok, tomtom_handler=tomtom_ok)
    r = client.get("/api/traffic", params=TRIP)
    assert r.status_code == 200, r.text
    out = r.json()

    assert out["recommended"] == {"provider": "google", "estimatedMinutes": 25, "trafficLevel": "moderate"}
    assert out["google"]["durationInTraffic"] == 1500
    assert out["tomtom"]["currentTravelTime"] == 140


def test_traffic_falls_back_to_tomtom(client):
    use_traffic_service(tomtom_handler=tomtom_ok)
    out = client.get("/api/traffic", params=TRIP).json()

    assert "google" not in out
    assert out["recommended"] == {"provider": "tomtom", "estimatedMinutes": 2, "trafficLevel": "moderate"}


def test_traffic_unavailable_without_providers(client):
    use_traffic_service()
    r = client.get("/api/traffic", params=TRIP)
    assert r.status_code == 503


def test_traffic_rounds_half_minutes_up(client):
    def google_half_minute(request):
        return httpx.Response(200, json={"routes": [{"duration": "1590s", "staticDuration": "1590s", "distanceMeters": 20000}]})

    use_traffic_service(google_handler=google_half_minute)
    out = client.get("/api/traffic", params=TRIP).json()

    assert out["recommended"]["estimatedMinutes"] == 27


def test_main_serves_app_with_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))

    runpy.run_module("main", run_name="__main__")

    assert calls[0][0] == "main:app"
    assert calls[0][1]["port"] == 8000

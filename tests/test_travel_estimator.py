import httpx
import pytest

from app.core.config import settings
from app.services.optimization_engine.google_routes_client import GoogleRoutesClient, traffic_condition
from app.services.optimization_engine.travel_estimator import (
    HaversineTravelEstimator,
    TrafficAwareTravelEstimator,
    TravelEstimate,
    get_travel_estimator,
    haversine_km,
    straight_line_estimate,
)
from app.utils.time_format import round_half_up

PRINCETON = (40.3573, -74.6672)
TRENTON = (40.2206, -74.7597)


def google_transport(status_code=200, body=None, captured=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        return httpx.Response(status_code, json=body if body is not None else {})
    return httpx.MockTransport(handler)


def unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def test_haversine_one_degree_of_longitude_at_equator():
    assert haversine_km((0.0, 0.0), (0.0, 1.0)) == pytest.approx(111.195, abs=0.01)


def test_straight_line_estimate_uses_fifty_kmh():
    estimate = straight_line_estimate((0.0, 0.0), (0.0, 1.0))
    assert estimate.duration_minutes == 133
    assert estimate.distance == pytest.approx(111195, abs=1)


def test_straight_line_estimate_same_point():
    assert straight_line_estimate(PRINCETON, PRINCETON) == TravelEstimate(duration_minutes=0, distance=0.0)


def test_fallback_is_deterministic():
    estimator = HaversineTravelEstimator()
    first = estimator.estimate(PRINCETON, TRENTON)
    assert all(estimator.estimate(PRINCETON, TRENTON) == first for _ in range(5))


def test_traffic_aware_estimate_uses_duration_in_traffic():
    captured = []
    body = {"routes": [{"duration": "1800s", "staticDuration": "1500s", "distanceMeters": 18250}]}
    client = GoogleRoutesClient(api_key="test-key", transport=google_transport(body=body, captured=captured))

    estimate = TrafficAwareTravelEstimator(client).estimate(PRINCETON, TRENTON)

    assert estimate == TravelEstimate(duration_minutes=30, distance=18250.0)
    request = captured[0]
    assert request.headers["X-Goog-Api-Key"] == "test-key"
    assert b'"routingPreference":"TRAFFIC_AWARE"' in request.content.replace(b" ", b"")


@pytest.mark.parametrize("duration,expected", [
    ("1590s", 27),
    ("1650s", 28),
    ("1589s", 26),
])
def test_traffic_aware_estimate_rounds_half_minutes_up(duration, expected):
    body = {"routes": [{"duration": duration, "staticDuration": duration, "distanceMeters": 1000}]}
    client = GoogleRoutesClient(api_key="test-key", transport=google_transport(body=body))

    estimate = TrafficAwareTravelEstimator(client).estimate(PRINCETON, TRENTON)

    assert estimate.duration_minutes == expected


@pytest.mark.parametrize("value,expected", [(26.5, 27), (27.5, 28), (0.5, 1), (26.49, 26)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


@pytest.mark.parametrize("transport", [
    google_transport(status_code=500, body={"error": "boom"}),
    google_transport(body={"routes": []}),
    httpx.MockTransport(unreachable),
])
def test_provider_failure_falls_back_to_straight_line(transport):
    client = GoogleRoutesClient(api_key="test-key", transport=transport)
    estimate = TrafficAwareTravelEstimator(client).estimate(PRINCETON, TRENTON)
    assert estimate == straight_line_estimate(PRINCETON, TRENTON)


def test_unconfigured_client_makes_no_request():
    def handler(request):
        raise AssertionError("no request expected")

    for key in ("", "your_api_key_here"):
        client = GoogleRoutesClient(api_key=key, transport=httpx.MockTransport(handler))
        assert not client.is_configured
        assert client.compute_route(PRINCETON, TRENTON) is None


def test_waypoints_are_sent_as_intermediates():
    captured = []
    body = {"routes": [{"duration": "600s", "staticDuration": "600s", "distanceMeters": 5000}]}
    client = GoogleRoutesClient(api_key="test-key", transport=google_transport(body=body, captured=captured))

    result = client.compute_route(PRINCETON, TRENTON, waypoints=[(40.3, -74.7)])

    assert result.traffic_condition == "light"
    assert b"intermediates" in captured[0].content


@pytest.mark.parametrize("static,in_traffic,expected", [
    (600, 600, "light"),
    (600, 780, "moderate"),
    (600, 900, "heavy"),
])
def test_traffic_condition(static, in_traffic, expected):
    assert traffic_condition(static, in_traffic) == expected


def test_factory_without_key_returns_straight_line_estimator(monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_MAPS_API_KEY", None)
    assert isinstance(get_travel_estimator(), HaversineTravelEstimator)


def test_factory_with_key_returns_traffic_aware_estimator(monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_MAPS_API_KEY", "real-key")
    assert isinstance(get_travel_estimator(), TrafficAwareTravelEstimator)

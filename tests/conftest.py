import threading

import pytest
from fastapi.testclient import TestClient

from app.dependencies import get_estimator
from app.services.optimization_engine.travel_estimator import TravelEstimate
from main import app


class FixedTravelEstimator:
    """Offline estimator: same drive time for every pair unless overridden."""

    def __init__(self, minutes=10, distance=1000.0, overrides=None):
        self.minutes = minutes
        self.distance = distance
        self.overrides = overrides or {}
        self.calls = []
        self._lock = threading.Lock()

    def estimate(self, origin, destination):
        with self._lock:
            self.calls.append((origin, destination))
        minutes = self.overrides.get((origin, destination), self.minutes)
        return TravelEstimate(duration_minutes=minutes, distance=self.distance)


@pytest.fixture
def fixed_estimator():
    """Factory for FixedTravelEstimator instances."""
    return FixedTravelEstimator


@pytest.fixture
def client():
    app.dependency_overrides[get_estimator] = lambda: FixedTravelEstimator(minutes=20)
    # IMPORTANT: this makes server exceptions come back as HTTP 500
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()

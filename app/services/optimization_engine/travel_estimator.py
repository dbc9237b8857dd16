"""
Travel time estimation between two points.

Provides a unified interface over the traffic provider and a straight-line
fallback so the optimizer always gets a usable number.
"""

import math
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from app.core.config import settings
from app.core.logging_config import logger
from app.services.optimization_engine.google_routes_client import GoogleRoutesClient
from app.utils.time_format import round_half_up, seconds_to_minutes

LatLng = Tuple[float, float]

EARTH_RADIUS_KM = 6371.0
AVERAGE_SPEED_KMH = 50.0


@dataclass(frozen=True)
class TravelEstimate:
    """Drive estimate for one ordered pair of points."""
    duration_minutes: int
    distance: float  # meters


class TravelEstimator(Protocol):
    """Protocol for travel estimators."""

    def estimate(self, origin: LatLng, destination: LatLng) -> TravelEstimate:
        """Estimate drive time and distance. Must not raise."""
        ...


def haversine_km(origin: LatLng, destination: LatLng) -> float:
    """Great-circle distance in kilometers."""
    lat1, lng1 = origin
    lat2, lng2 = destination
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def straight_line_estimate(origin: LatLng, destination: LatLng) -> TravelEstimate:
    """Haversine distance driven at a fixed average speed, rounded to the minute."""
    km = haversine_km(origin, destination)
    return TravelEstimate(
        duration_minutes=round_half_up(km / AVERAGE_SPEED_KMH * 60),
        distance=float(round_half_up(km * 1000))
    )


class HaversineTravelEstimator:
    """Offline estimator; deterministic for identical coordinates."""

    def estimate(self, origin: LatLng, destination: LatLng) -> TravelEstimate:
        return straight_line_estimate(origin, destination)


class TrafficAwareTravelEstimator:
    """Google Routes traffic-aware estimates with straight-line fallback."""

    def __init__(self, client: Optional[GoogleRoutesClient] = None):
        self.client = client or GoogleRoutesClient()

    def estimate(self, origin: LatLng, destination: LatLng) -> TravelEstimate:
        try:
            result = self.client.compute_route(origin, destination)
        except Exception as e:
            logger.error(f"Unexpected traffic provider failure for {origin} -> {destination}: {str(e)}")
            result = None

        if result is None:
            logger.debug(f"Falling back to straight-line estimate for {origin} -> {destination}")
            return straight_line_estimate(origin, destination)

        return TravelEstimate(
            duration_minutes=seconds_to_minutes(result.duration_in_traffic),
            distance=float(result.distance)
        )


def get_travel_estimator() -> TravelEstimator:
    """
    Factory function to get the configured travel estimator.
    
    Returns:
        Traffic-aware estimator when a Google Maps key is set, otherwise the
        straight-line estimator
    """
    if settings.google_maps_configured:
        return TrafficAwareTravelEstimator(GoogleRoutesClient())
    return HaversineTravelEstimator()

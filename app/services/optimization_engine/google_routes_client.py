"""
Google Routes API client for traffic-aware drive estimates.

Handles communication with the Routes API computeRoutes endpoint.
"""

import httpx
from typing import List, Dict, Any, Tuple, Optional
from app.core.config import settings, PLACEHOLDER_API_KEY
from app.core.logging_config import logger
from app.schemas.traffic import GoogleTrafficResult


def traffic_condition(duration: int, duration_in_traffic: int) -> str:
    """Classify congestion from the ratio of traffic-aware to static duration."""
    if duration <= 0:
        return "light"
    ratio = duration_in_traffic / duration
    if ratio < 1.2:
        return "light"
    if ratio < 1.5:
        return "moderate"
    return "heavy"


class GoogleRoutesClient:
    """Client for Google Routes API."""
    
    BASE_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"
    FIELD_MASK = "routes.duration,routes.staticDuration,routes.distanceMeters,routes.travelAdvisory"
    
    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize Google Routes client.
        
        Args:
            api_key: Google Maps API key (defaults to env var)
            timeout: Request timeout in seconds (defaults to env var)
            transport: Optional httpx transport, used to stub the API in tests
        """
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.timeout = timeout or settings.TRAFFIC_REQUEST_TIMEOUT_SECONDS
        self._transport = transport
        if not self.is_configured:
            logger.warning("GOOGLE_MAPS_API_KEY not set. Travel times will use straight-line estimates.")
    
    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY
    
    def _build_request_payload(
        self,
        origin: Tuple[float, float],
        destination: Tuple[float, float],
        waypoints: Optional[List[Tuple[float, float]]] = None
    ) -> Dict[str, Any]:
        """
        Build the request payload for computeRoutes.
        
        Args:
            origin: (lat, lng) of the start point
            destination: (lat, lng) of the end point
            waypoints: Optional (lat, lng) intermediate points
            
        Returns:
            Request payload dict
        """
        def waypoint(lat: float, lng: float) -> Dict[str, Any]:
            return {"location": {"latLng": {"latitude": lat, "longitude": lng}}}
        
        payload = {
            "origin": waypoint(*origin),
            "destination": waypoint(*destination),
            "travelMode": "DRIVE",
            "routingPreference": "TRAFFIC_AWARE",
            "computeAlternativeRoutes": False,
            "extraComputations": ["TRAFFIC_ON_POLYLINE"],
        }
        if waypoints:
            payload["intermediates"] = [waypoint(lat, lng) for lat, lng in waypoints]
        return payload
    
    @staticmethod
    def _parse_seconds(value: Optional[str]) -> int:
        """Routes API durations are strings like "1234s"."""
        if not value:
            return 0
        return int(float(value.rstrip("s")))
    
    def compute_route(
        self,
        origin: Tuple[float, float],
        destination: Tuple[float, float],
        waypoints: Optional[List[Tuple[float, float]]] = None
    ) -> Optional[GoogleTrafficResult]:
        """
        Get a traffic-aware drive estimate between two points.
        
        Args:
            origin: (lat, lng) of the start point
            destination: (lat, lng) of the end point
            waypoints: Optional (lat, lng) intermediate points
            
        Returns:
            GoogleTrafficResult, or None when the API is not configured,
            unreachable or returns no route
        """
        if not self.is_configured:
            return None
        
        payload = self._build_request_payload(origin, destination, waypoints)
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": self.FIELD_MASK,
        }
        
        try:
            with httpx.Client(transport=self._transport) as client:
                response = client.post(self.BASE_URL, json=payload, headers=headers, timeout=self.timeout)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Google Routes API error {e.response.status_code}: {e.response.text}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to get route from Google Routes API: {str(e)}")
            return None
        
        routes = data.get("routes") or []
        if not routes:
            logger.warning(f"No routes in Google Routes response for {origin} -> {destination}")
            return None
        
        route = routes[0]
        duration = self._parse_seconds(route.get("staticDuration"))
        duration_in_traffic = self._parse_seconds(route.get("duration"))
        
        return GoogleTrafficResult(
            duration=duration,
            duration_in_traffic=duration_in_traffic,
            distance=route.get("distanceMeters") or 0,
            traffic_condition=traffic_condition(duration, duration_in_traffic)
        )

"""
TomTom Traffic Flow API client.

Reads flow segment data (free-flow vs. current travel time) for the road
segment closest to a point.
"""

import httpx
from typing import Tuple, Optional
from app.core.config import settings
from app.core.logging_config import logger
from app.schemas.traffic import TomTomTrafficResult


def traffic_level(ratio: float) -> str:
    """Describe congestion from the current / free-flow travel time ratio."""
    if ratio < 1.15:
        return "free flow"
    if ratio < 1.3:
        return "light"
    if ratio < 1.5:
        return "moderate"
    return "heavy"


class TomTomClient:
    """Client for TomTom Traffic Flow Segment Data API."""
    
    BASE_URL = "https://api.tomtom.com/traffic/services/4/flowSegmentData"
    
    # Flow style and zoom level of the segment lookup
    FLOW_STYLE = "absolute"
    ZOOM = 10
    
    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize TomTom client.
        
        Args:
            api_key: TomTom API key (defaults to env var)
            timeout: Request timeout in seconds (defaults to env var)
            transport: Optional httpx transport, used to stub the API in tests
        """
        self.api_key = api_key if api_key is not None else settings.TOMTOM_API_KEY
        self.timeout = timeout or settings.TRAFFIC_REQUEST_TIMEOUT_SECONDS
        self._transport = transport
        if not self.api_key:
            logger.warning("TOMTOM_API_KEY not set. TomTom traffic flow disabled.")
    
    def get_flow_segment(self, point: Tuple[float, float]) -> Optional[TomTomTrafficResult]:
        """
        Get traffic flow for the road segment at a point.
        
        Args:
            point: (lat, lng) to look up
            
        Returns:
            TomTomTrafficResult, or None when the API is not configured,
            unreachable or has no segment data
        """
        if not self.api_key:
            return None
        
        lat, lng = point
        url = f"{self.BASE_URL}/{self.FLOW_STYLE}/{self.ZOOM}/json"
        params = {"point": f"{lat},{lng}", "key": self.api_key}
        
        try:
            with httpx.Client(transport=self._transport) as client:
                response = client.get(url, params=params, timeout=self.timeout)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"TomTom API error {e.response.status_code}: {e.response.text}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to get flow segment from TomTom: {str(e)}")
            return None
        
        flow = data.get("flowSegmentData")
        if not flow:
            logger.warning(f"No flow segment data from TomTom for {point}")
            return None
        
        return TomTomTrafficResult(
            free_flow_travel_time=flow.get("freeFlowTravelTime") or 0,
            current_travel_time=flow.get("currentTravelTime") or 0,
            confidence=flow.get("confidence") or 0
        )

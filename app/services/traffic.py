from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple
from fastapi import HTTPException, status
from app.schemas.traffic import TrafficRecommendation, TrafficResponse
from app.services.optimization_engine.google_routes_client import GoogleRoutesClient
from app.services.optimization_engine.tomtom_client import TomTomClient, traffic_level
from app.core.logging_config import logger
from app.utils.time_format import seconds_to_minutes


class TrafficService:
    """Combined Google Routes / TomTom traffic lookup for a trip."""
    
    def __init__(self, google_client: GoogleRoutesClient, tomtom_client: TomTomClient):
        self.google_client = google_client
        self.tomtom_client = tomtom_client
    
    def get_traffic_data(
        self,
        origin: Tuple[float, float],
        destination: Tuple[float, float],
        waypoints: Optional[List[Tuple[float, float]]] = None
    ) -> TrafficResponse:
        """
        Query both providers concurrently and recommend an estimate.
        
        Google is preferred when it answers; TomTom flow data at the origin is
        the fallback.
        
        Raises:
            HTTPException 503: If neither provider returned data
        """
        with ThreadPoolExecutor(max_workers=2) as executor:
            google_future = executor.submit(self.google_client.compute_route, origin, destination, waypoints)
            tomtom_future = executor.submit(self.tomtom_client.get_flow_segment, origin)
            google = google_future.result()
            tomtom = tomtom_future.result()
        
        if google is None and tomtom is None:
            logger.warning(f"No traffic data available for {origin} -> {destination}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="No traffic data available. Check API keys in .env"
            )
        
        if google is not None:
            recommended = TrafficRecommendation(
                provider="google",
                estimated_minutes=seconds_to_minutes(google.duration_in_traffic),
                traffic_level=google.traffic_condition
            )
        else:
            ratio = tomtom.current_travel_time / (tomtom.free_flow_travel_time or 1)
            recommended = TrafficRecommendation(
                provider="tomtom",
                estimated_minutes=seconds_to_minutes(tomtom.current_travel_time),
                traffic_level=traffic_level(ratio)
            )
        
        return TrafficResponse(google=google, tomtom=tomtom, recommended=recommended)

from app.services.optimization_engine.google_routes_client import GoogleRoutesClient
from app.services.optimization_engine.tomtom_client import TomTomClient
from app.services.optimization_engine.travel_estimator import TravelEstimator, get_travel_estimator
from app.services.traffic import TrafficService


def get_estimator() -> TravelEstimator:
    """
    Travel estimator for the current request.
    
    Overridden in tests with an offline estimator.
    """
    return get_travel_estimator()


def get_traffic_service() -> TrafficService:
    """Traffic lookup service with clients built from current settings."""
    return TrafficService(google_client=GoogleRoutesClient(), tomtom_client=TomTomClient())

from pydantic import Field
from typing import Literal, Optional

from app.schemas.common import CamelModel

TrafficCondition = Literal["light", "moderate", "heavy"]


class GoogleTrafficResult(CamelModel):
    """Google Routes drive estimate. Durations in seconds, distance in meters."""
    duration: int
    duration_in_traffic: int
    distance: float
    traffic_condition: TrafficCondition


class TomTomTrafficResult(CamelModel):
    """TomTom flow segment data around a single point. Times in seconds."""
    free_flow_travel_time: float
    current_travel_time: float
    confidence: float


class TrafficRecommendation(CamelModel):
    provider: Literal["google", "tomtom"] = "google"
    estimated_minutes: int = 0
    traffic_level: str = "unknown"


class TrafficResponse(CamelModel):
    """Combined traffic lookup; providers without data are omitted."""
    google: Optional[GoogleTrafficResult] = None
    tomtom: Optional[TomTomTrafficResult] = None
    recommended: TrafficRecommendation = Field(default_factory=TrafficRecommendation)

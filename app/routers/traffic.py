from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from app.dependencies import get_traffic_service
from app.schemas.common import Location
from app.schemas.traffic import TrafficResponse
from app.services.traffic import TrafficService

router = APIRouter()


def _parse_point(value: str) -> Location:
    try:
        return Location.from_query(value)
    except (ValueError, ValidationError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid coordinate format. Use: lat,lng (e.g., 40.3573,-74.6672)"
        )


@router.get("", response_model=TrafficResponse, response_model_exclude_none=True)
def get_traffic(
    origin: Optional[str] = Query(None, description="lat,lng"),
    destination: Optional[str] = Query(None, description="lat,lng"),
    waypoints: Optional[str] = Query(None, description="lat,lng|lat,lng|..."),
    traffic_service: TrafficService = Depends(get_traffic_service)
):
    """
    Current drive time between two points from the configured traffic providers.
    
    Raises:
        HTTPException 400: If origin/destination are missing or malformed
        HTTPException 503: If no provider returned data
    """
    if not origin or not destination:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required params: origin and destination (lat,lng)"
        )
    
    via: List[Location] = [_parse_point(p) for p in waypoints.split("|") if p] if waypoints else []
    
    return traffic_service.get_traffic_data(
        origin=_parse_point(origin).coords,
        destination=_parse_point(destination).coords,
        waypoints=[point.coords for point in via] or None
    )

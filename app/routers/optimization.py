from fastapi import APIRouter, Depends
from app.dependencies import get_estimator
from app.schemas.optimization import OptimizeRequest, OptimizeResponse
from app.services.optimization import optimization_service
from app.services.optimization_engine import TravelEstimator

router = APIRouter()


@router.post("", response_model=OptimizeResponse, response_model_exclude_none=True)
def optimize_route(
    request_data: OptimizeRequest,
    estimator: TravelEstimator = Depends(get_estimator)
):
    """
    Compute the day's visiting order for a single technician.
    
    Stops that cannot be reached inside their time window are still scheduled;
    they are reported in `warnings` and flip `feasible` to false.
    
    Args:
        request_data: Stops, start time, optional start location and home base
        estimator: Travel estimator (traffic-aware when configured)
    
    Returns:
        Ordered route with arrival/departure times and totals
        
    Raises:
        HTTPException 400: If the stop list is empty or has duplicate ids
    
    Example:
        ```json
        {
            "stops": [
                {"id": "a1", "name": "Aquarium Cafe", "lat": 40.35, "lng": -74.66,
                 "timeWindow": {"open": "09:00", "close": "12:00"}, "priority": "high"}
            ],
            "startTime": "08:00",
            "homeBase": {"lat": 40.34, "lng": -74.65, "address": "12 Main St"},
            "returnHome": true
        }
        ```
    """
    return optimization_service.optimize(request_data, estimator)

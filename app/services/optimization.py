from collections import Counter
from fastapi import HTTPException, status
from app.schemas.optimization import OptimizeRequest, OptimizeResponse
from app.services.optimization_engine import RESERVED_NODE_IDS, TravelEstimator, optimize_route
from app.core.logging_config import logger


class OptimizationService:
    """
    Service layer for route optimization requests.
    
    Rejects malformed stop sets before they reach the optimizer; everything
    past validation always produces a route.
    """
    
    def validate_request(self, request_data: OptimizeRequest) -> None:
        """
        Check the parts of a request the schema cannot express.
        
        Raises:
            HTTPException 400: If the stop list is empty or its ids collide with each
                other or with the start/home nodes
        """
        if not request_data.stops:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing or empty stops array"
            )
        
        duplicates = sorted(stop_id for stop_id, count in Counter(s.id for s in request_data.stops).items() if count > 1)
        if duplicates:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Duplicate stop ids: {', '.join(duplicates)}"
            )
        
        reserved = sorted({s.id for s in request_data.stops if s.id in RESERVED_NODE_IDS})
        if reserved:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Reserved stop ids: {', '.join(reserved)}"
            )
    
    def optimize(
        self,
        request_data: OptimizeRequest,
        estimator: TravelEstimator
    ) -> OptimizeResponse:
        """
        Validate a request and compute the optimized route.
        
        Args:
            request_data: Optimization request
            estimator: Travel estimator for the travel matrix
            
        Returns:
            Optimized route with totals and feasibility warnings
        """
        self.validate_request(request_data)
        result = optimize_route(request_data, estimator)
        
        if not result.feasible:
            logger.warning(f"Route is infeasible: {len(result.warnings or [])} warnings")
        
        return result


optimization_service = OptimizationService()

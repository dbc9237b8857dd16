"""
Optimization package for single-vehicle time-window route construction.

This package provides modular components for:
- Travel time estimation via Google Routes with a straight-line fallback
- Travel matrix construction in bounded concurrent batches
- Time-window feasibility and candidate scoring
- Greedy route construction
"""

from .travel_estimator import (
    TravelEstimate,
    TravelEstimator,
    HaversineTravelEstimator,
    TrafficAwareTravelEstimator,
    get_travel_estimator,
)
from .travel_matrix import TravelMatrixBuilder, MatrixNode, RESERVED_NODE_IDS
from .scoring import check_feasibility, score_candidate
from .route_constructor import RouteConstructor, optimize_route

__all__ = [
    "TravelEstimate",
    "TravelEstimator",
    "HaversineTravelEstimator",
    "TrafficAwareTravelEstimator",
    "get_travel_estimator",
    "TravelMatrixBuilder",
    "MatrixNode",
    "RESERVED_NODE_IDS",
    "check_feasibility",
    "score_candidate",
    "RouteConstructor",
    "optimize_route",
]

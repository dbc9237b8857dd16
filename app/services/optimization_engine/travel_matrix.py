"""
Travel matrix builder.

Computes pairwise drive estimates for every ordered pair of route nodes by
calling the travel estimator in bounded concurrent batches.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from app.core.config import settings
from app.core.logging_config import logger
from app.services.optimization_engine.travel_estimator import TravelEstimate, TravelEstimator

HOME_NODE_ID = "__home__"
START_NODE_ID = "__start__"
RESERVED_NODE_IDS = (START_NODE_ID, HOME_NODE_ID)

# Used when the matrix has no entry for a pair
DEFAULT_TRAVEL = TravelEstimate(duration_minutes=30, distance=0.0)

TravelMatrix = Dict[str, Dict[str, TravelEstimate]]


@dataclass(frozen=True)
class MatrixNode:
    """A point in the travel matrix (stop, home base or start location)."""
    id: str
    lat: float
    lng: float

    @property
    def coords(self) -> Tuple[float, float]:
        return (self.lat, self.lng)


def lookup_travel(matrix: TravelMatrix, from_id: Optional[str], to_id: str) -> TravelEstimate:
    """
    Read a matrix entry.

    Args:
        matrix: Travel matrix
        from_id: Origin node id, or None when there is no current position
        to_id: Destination node id

    Returns:
        Zero travel when there is no origin, the matrix entry when present,
        otherwise the 30-minute default
    """
    if from_id is None:
        return TravelEstimate(duration_minutes=0, distance=0.0)
    entry = matrix.get(from_id, {}).get(to_id)
    if entry is None:
        logger.warning(f"No travel matrix entry for {from_id} -> {to_id}, using default")
        return DEFAULT_TRAVEL
    return entry


class TravelMatrixBuilder:
    """Builds a TravelMatrix with at most ``batch_size`` estimator calls in flight."""

    def __init__(self, estimator: TravelEstimator, batch_size: Optional[int] = None):
        self.estimator = estimator
        self.batch_size = max(1, batch_size or settings.TRAVEL_MATRIX_BATCH_SIZE)

    def build(self, nodes: List[MatrixNode]) -> TravelMatrix:
        """
        Build the full pairwise matrix.

        Batches run one after another; calls inside a batch run concurrently.
        Results are merged on the calling thread once each batch completes.

        Args:
            nodes: Matrix nodes, ids must be unique

        Returns:
            matrix[from_id][to_id] for every ordered pair of distinct nodes
        """
        matrix: TravelMatrix = {node.id: {} for node in nodes}
        pairs = [(a, b) for a in nodes for b in nodes if a.id != b.id]
        if not pairs:
            return matrix

        logger.info(
            f"Building travel matrix: {len(nodes)} nodes, {len(pairs)} pairs, "
            f"batch_size={self.batch_size}"
        )

        with ThreadPoolExecutor(max_workers=self.batch_size) as executor:
            for start in range(0, len(pairs), self.batch_size):
                batch = pairs[start:start + self.batch_size]
                futures = [
                    executor.submit(self.estimator.estimate, a.coords, b.coords)
                    for a, b in batch
                ]
                for (a, b), future in zip(batch, futures):
                    try:
                        matrix[a.id][b.id] = future.result()
                    except Exception as e:
                        # Left out of the matrix; lookups fall back to DEFAULT_TRAVEL
                        logger.error(f"Travel estimate failed for {a.id} -> {b.id}: {str(e)}")

        logger.info(f"Travel matrix computed: {len(nodes)}x{len(nodes)}")
        return matrix

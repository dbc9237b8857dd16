"""
Greedy time-window-aware route construction.

Builds a single-vehicle visiting order one stop at a time: every iteration
scores the unvisited stops from the current position and visits the best one.
Stops whose windows cannot be honored are still scheduled and reported through
warnings and the ``feasible`` flag.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from app.core.logging_config import logger
from app.schemas.optimization import (
    OptimizeRequest,
    OptimizeResponse,
    OptimizedStop,
    Priority,
    Stop,
)
from app.services.optimization_engine.scoring import (
    Feasible,
    check_feasibility,
    score_candidate,
    urgency_key,
)
from app.services.optimization_engine.travel_estimator import (
    TravelEstimate,
    TravelEstimator,
    straight_line_estimate,
)
from app.services.optimization_engine.travel_matrix import (
    HOME_NODE_ID,
    START_NODE_ID,
    MatrixNode,
    TravelMatrix,
    TravelMatrixBuilder,
    lookup_travel,
)
from app.utils.time_format import minutes_to_time, time_to_minutes

# A stop closing within this many minutes of the day start is visited first
FORCED_FIRST_WINDOW_MINUTES = 240


@dataclass(frozen=True)
class RouteTotals:
    distance: float = 0.0
    drive_time: int = 0
    service_time: int = 0


@dataclass(frozen=True)
class RouteState:
    """Snapshot of the construction loop between two visits."""
    current_time: int
    current_id: Optional[str]
    unvisited: Tuple[str, ...]
    totals: RouteTotals = field(default_factory=RouteTotals)
    route: Tuple[OptimizedStop, ...] = ()
    warnings: Tuple[str, ...] = ()
    feasible: bool = True


@dataclass(frozen=True)
class Selection:
    stop_id: str
    travel: TravelEstimate
    reachable: bool = True


def matrix_nodes(request: OptimizeRequest) -> List[MatrixNode]:
    """Stops first, then the start location and home base when present."""
    nodes = [MatrixNode(id=stop.id, lat=stop.lat, lng=stop.lng) for stop in request.stops]
    if request.start_location is not None:
        nodes.append(MatrixNode(id=START_NODE_ID, lat=request.start_location.lat, lng=request.start_location.lng))
    if request.home_base is not None:
        nodes.append(MatrixNode(id=HOME_NODE_ID, lat=request.home_base.lat, lng=request.home_base.lng))
    return nodes


def empty_response(request: OptimizeRequest) -> OptimizeResponse:
    return OptimizeResponse(
        optimized_route=[],
        total_duration=0,
        total_distance=0.0,
        total_drive_time=0,
        total_service_time=0,
        estimated_end_time=request.start_time,
        feasible=True
    )


class RouteConstructor:
    """Runs the greedy construction over a prebuilt travel matrix."""

    def __init__(self, request: OptimizeRequest, matrix: TravelMatrix):
        self.request = request
        self.matrix = matrix
        self.stops: Dict[str, Stop] = {stop.id: stop for stop in request.stops}
        self.start_minutes = time_to_minutes(request.start_time)

    def initial_state(self) -> RouteState:
        if self.request.start_location is not None:
            current_id = START_NODE_ID
        elif self.request.home_base is not None:
            current_id = HOME_NODE_ID
        else:
            current_id = None

        return RouteState(
            current_time=self.start_minutes,
            current_id=current_id,
            unvisited=tuple(stop.id for stop in self.request.stops)
        )

    def forced_first_stop(self) -> Optional[str]:
        """
        The most urgent stop, if it is urgent enough to go first regardless of score.

        Stops are ordered by priority (high first) then by closing time; the head
        is forced when it is high priority or closes within four hours of the start.
        """
        candidate = sorted(self.request.stops, key=urgency_key)[0]
        if candidate.priority == Priority.high:
            return candidate.id
        window = candidate.time_window
        if window is not None and window.close_minutes < self.start_minutes + FORCED_FIRST_WINDOW_MINUTES:
            return candidate.id
        return None

    def select_next(self, state: RouteState) -> Selection:
        """
        Pick the best-scoring unvisited stop.

        Candidates are scanned in input order and only a strictly better score
        replaces the current best, so ties go to the earlier stop. When nothing
        is feasible the first remaining stop is returned as unreachable.
        """
        best: Optional[Selection] = None
        best_score = 0.0

        for stop_id in state.unvisited:
            travel = lookup_travel(self.matrix, state.current_id, stop_id)
            result = score_candidate(self.stops[stop_id], travel.duration_minutes, state.current_time)
            logger.debug(f"Candidate {stop_id}: travel={travel.duration_minutes}m score={result}")

            if isinstance(result, Feasible) and (best is None or result.score > best_score):
                best = Selection(stop_id=stop_id, travel=travel)
                best_score = result.score

        if best is not None:
            return best

        stop_id = state.unvisited[0]
        return Selection(
            stop_id=stop_id,
            travel=lookup_travel(self.matrix, state.current_id, stop_id),
            reachable=False
        )

    def visit(self, state: RouteState, selection: Selection) -> RouteState:
        """Schedule the selected stop and advance clock, position and totals."""
        stop = self.stops[selection.stop_id]
        warnings = list(state.warnings)
        feasible = state.feasible

        if not selection.reachable:
            warnings.append(f"Stop {stop.id} may not be reachable within time window")
            feasible = False

        travel_minutes = selection.travel.duration_minutes
        arrival = state.current_time + travel_minutes
        feasibility = check_feasibility(stop, arrival)
        if not feasibility.feasible:
            logger.warning(f"Stop {stop.id} scheduled after its window closes (arrival {minutes_to_time(arrival)})")
            warnings.append(f"Cannot reach {stop.name} before close time")
            feasible = False

        actual_arrival = arrival + feasibility.wait_minutes
        departure = actual_arrival + stop.service_minutes

        optimized = OptimizedStop(
            id=stop.id,
            name=stop.name,
            order=len(state.route) + 1,
            arrival_time=minutes_to_time(actual_arrival),
            departure_time=minutes_to_time(departure),
            wait_time=feasibility.wait_minutes or None,
            travel_time_from_previous=travel_minutes
        )

        totals = RouteTotals(
            distance=state.totals.distance + selection.travel.distance,
            drive_time=state.totals.drive_time + travel_minutes,
            service_time=state.totals.service_time + stop.service_minutes
        )

        return replace(
            state,
            current_time=departure,
            current_id=stop.id,
            unvisited=tuple(stop_id for stop_id in state.unvisited if stop_id != stop.id),
            totals=totals,
            route=state.route + (optimized,),
            warnings=tuple(warnings),
            feasible=feasible
        )

    def return_home(self, state: RouteState) -> Tuple[RouteState, Optional[int]]:
        """
        Drive from the last stop back to the home base when requested.

        Returns:
            Updated state and the return leg in minutes (None when not applied)
        """
        home = self.request.home_base
        if not self.request.return_home or home is None or not state.route:
            return state, None

        travel = self.matrix.get(state.current_id, {}).get(HOME_NODE_ID)
        if travel is None:
            travel = straight_line_estimate(self.stops[state.current_id].coords, home.coords)

        totals = replace(
            state.totals,
            distance=state.totals.distance + travel.distance,
            drive_time=state.totals.drive_time + travel.duration_minutes
        )
        state = replace(
            state,
            current_time=state.current_time + travel.duration_minutes,
            current_id=HOME_NODE_ID,
            totals=totals
        )
        return state, travel.duration_minutes

    def run(self) -> OptimizeResponse:
        if not self.request.stops:
            return empty_response(self.request)

        state = self.initial_state()

        forced_id = self.forced_first_stop()
        if forced_id is not None:
            logger.debug(f"Visiting urgent stop {forced_id} first")
            state = self.visit(state, Selection(
                stop_id=forced_id,
                travel=lookup_travel(self.matrix, state.current_id, forced_id)
            ))

        while state.unvisited:
            state = self.visit(state, self.select_next(state))

        state, return_to_home_time = self.return_home(state)

        return OptimizeResponse(
            optimized_route=list(state.route),
            total_duration=state.current_time - self.start_minutes,
            total_distance=state.totals.distance,
            total_drive_time=state.totals.drive_time,
            total_service_time=state.totals.service_time,
            estimated_end_time=minutes_to_time(state.current_time),
            feasible=state.feasible,
            warnings=list(state.warnings) or None,
            return_to_home_time=return_to_home_time
        )


def optimize_route(
    request: OptimizeRequest,
    estimator: TravelEstimator,
    batch_size: Optional[int] = None
) -> OptimizeResponse:
    """
    Build the travel matrix and construct the day's route.

    Args:
        request: Stops, start time and optional start location / home base
        estimator: Travel estimator used for every matrix entry
        batch_size: Concurrent estimator calls per batch (defaults to settings)

    Returns:
        OptimizeResponse; infeasible windows are reported, never raised
    """
    if not request.stops:
        logger.info("Optimization requested with no stops")
        return empty_response(request)

    logger.info(
        f"Optimizing route: {len(request.stops)} stops, start={request.start_time}, "
        f"home_base={request.home_base is not None}, return_home={request.return_home}"
    )

    matrix = TravelMatrixBuilder(estimator, batch_size=batch_size).build(matrix_nodes(request))
    response = RouteConstructor(request, matrix).run()

    logger.info(
        f"Route optimized: {len(response.optimized_route)} stops, "
        f"duration={response.total_duration}m, drive={response.total_drive_time}m, "
        f"end={response.estimated_end_time}, feasible={response.feasible}"
    )
    return response

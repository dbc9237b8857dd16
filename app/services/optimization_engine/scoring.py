"""
Feasibility and scoring for greedy stop selection.

Pure functions: given a stop and a prospective arrival, decide whether the
stop's time window can be honored and how attractive the stop is as the next
visit. Higher scores are better.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from app.schemas.optimization import Priority, Stop
from app.utils.time_format import MINUTES_PER_DAY

PRIORITY_WEIGHTS: Dict[Priority, int] = {
    Priority.high: 3,
    Priority.medium: 2,
    Priority.low: 1,
}
DEFAULT_PRIORITY_WEIGHT = PRIORITY_WEIGHTS[Priority.medium]

PRIORITY_BONUS_PER_WEIGHT = 30
URGENT_SLACK_MINUTES = 60
URGENCY_BONUS = 50


@dataclass(frozen=True)
class FeasibilityResult:
    feasible: bool
    wait_minutes: int = 0


@dataclass(frozen=True)
class Feasible:
    """Candidate that can be served; carries its ranking score."""
    score: float


class Infeasible:
    """Candidate whose window closes before the prospective arrival."""

    def __repr__(self) -> str:
        return "INFEASIBLE"


INFEASIBLE = Infeasible()

CandidateScore = Union[Feasible, Infeasible]


def priority_weight(priority: Optional[Priority]) -> int:
    if priority is None:
        return DEFAULT_PRIORITY_WEIGHT
    return PRIORITY_WEIGHTS.get(priority, DEFAULT_PRIORITY_WEIGHT)


def check_feasibility(stop: Stop, arrival_minutes: float) -> FeasibilityResult:
    """
    Check an arrival against the stop's time window.

    Args:
        stop: Stop being considered
        arrival_minutes: Prospective arrival, minutes since midnight

    Returns:
        Infeasible when arriving after close; otherwise feasible with the wait
        needed for the window to open (0 when already open or no window)
    """
    window = stop.time_window
    if window is None:
        return FeasibilityResult(feasible=True)

    if arrival_minutes > window.close_minutes:
        return FeasibilityResult(feasible=False)

    wait = window.open_minutes - arrival_minutes if arrival_minutes < window.open_minutes else 0
    return FeasibilityResult(feasible=True, wait_minutes=int(wait))


def score_candidate(stop: Stop, travel_minutes: float, current_time_minutes: float) -> CandidateScore:
    """
    Rank a stop as the next visit.

    Cost is travel plus wait, reduced by 50 when the window is nearly closing
    (under 60 minutes of slack after any wait) and by 30 per priority weight.
    The score is the negated cost.

    Returns:
        Feasible(score), or INFEASIBLE when the window would be missed
    """
    arrival = current_time_minutes + travel_minutes
    feasibility = check_feasibility(stop, arrival)
    if not feasibility.feasible:
        return INFEASIBLE

    cost = travel_minutes + feasibility.wait_minutes

    if stop.time_window is not None:
        slack = stop.time_window.close_minutes - (arrival + feasibility.wait_minutes)
        if slack < URGENT_SLACK_MINUTES:
            cost -= URGENCY_BONUS

    cost -= priority_weight(stop.priority) * PRIORITY_BONUS_PER_WEIGHT

    return Feasible(score=-cost)


def urgency_key(stop: Stop) -> Tuple[int, int]:
    """Sort key: higher priority first, then earlier close (no window = end of day)."""
    close = stop.time_window.close_minutes if stop.time_window else MINUTES_PER_DAY
    return (-priority_weight(stop.priority), close)

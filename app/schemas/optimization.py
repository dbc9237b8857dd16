import enum
from pydantic import Field, field_validator
from typing import Optional, List, Tuple

from app.schemas.common import CamelModel, Location
from app.utils.time_format import validate_hhmm, time_to_minutes

DEFAULT_START_TIME = "08:00"
DEFAULT_SERVICE_DURATION_MINUTES = 30


class Priority(str, enum.Enum):
    high = "high"
    medium = "medium"
    low = "low"


class TimeWindow(CamelModel):
    """Same-day service window, both ends inclusive."""
    open: str = Field(..., description="Earliest service start (HH:MM)")
    close: str = Field(..., description="Latest arrival (HH:MM)")

    @field_validator("open", "close")
    @classmethod
    def check_time(cls, v: str) -> str:
        return validate_hhmm(v)

    @property
    def open_minutes(self) -> int:
        return time_to_minutes(self.open)

    @property
    def close_minutes(self) -> int:
        return time_to_minutes(self.close)


class Stop(CamelModel):
    """A location the technician has to visit."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    time_window: Optional[TimeWindow] = None
    duration: Optional[int] = Field(None, ge=0, description="Minutes on site")
    priority: Priority = Priority.medium

    @property
    def coords(self) -> Tuple[float, float]:
        return (self.lat, self.lng)

    @property
    def service_minutes(self) -> int:
        if self.duration is None:
            return DEFAULT_SERVICE_DURATION_MINUTES
        return self.duration


class HomeBase(CamelModel):
    """Technician depot; optional start and end of the day."""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    address: str = ""

    @property
    def coords(self) -> Tuple[float, float]:
        return (self.lat, self.lng)


class OptimizeRequest(CamelModel):
    """Schema for a single-vehicle route optimization request."""
    stops: List[Stop] = Field(default_factory=list)
    start_time: str = Field(DEFAULT_START_TIME, description="Day start (HH:MM)")
    start_location: Optional[Location] = None
    home_base: Optional[HomeBase] = None
    return_home: bool = False

    @field_validator("start_time")
    @classmethod
    def check_start_time(cls, v: str) -> str:
        return validate_hhmm(v)


class OptimizedStop(CamelModel):
    """One visit in the produced route."""
    id: str
    name: str
    order: int
    arrival_time: str
    departure_time: str
    wait_time: Optional[int] = None
    travel_time_from_previous: int = 0


class OptimizeResponse(CamelModel):
    """Schema for the optimized route and its totals."""
    optimized_route: List[OptimizedStop]
    total_duration: int
    total_distance: float
    total_drive_time: int
    total_service_time: int
    estimated_end_time: str
    feasible: bool
    warnings: Optional[List[str]] = None
    return_to_home_time: Optional[int] = None

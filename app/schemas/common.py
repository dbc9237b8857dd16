from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Tuple


class CamelModel(BaseModel):
    """Base for wire schemas: snake_case in Python, camelCase in JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(CamelModel):
    lat: float = Field(..., description="Latitude", ge=-90, le=90)
    lng: float = Field(..., description="Longitude", ge=-180, le=180)

    @property
    def coords(self) -> Tuple[float, float]:
        """(lat, lng) tuple as consumed by the travel estimators."""
        return (self.lat, self.lng)

    @classmethod
    def from_query(cls, value: str) -> "Location":
        """
        Parse a "lat,lng" query-string value.

        Raises:
            ValueError: If the value is not two comma-separated numbers in range
        """
        parts = value.split(",")
        if len(parts) != 2:
            raise ValueError(f"Invalid coordinate '{value}'")
        return cls(lat=float(parts[0]), lng=float(parts[1]))

# path: route-extract-api/route_extract/models/route_models.py

from __future__ import annotations

from typing import List, Literal, NamedTuple, Optional
import math

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


GeometrySource = Literal["osrm", "interpolated"]

DEFAULT_ROUTE_NAME = "Extracted Route"
DEFAULT_LOCATION = "Unknown"
DEFAULT_CONFIDENCE = 0.5


class Waypoint(BaseModel):
    """Sparse point read off the screenshot by the vision oracle."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    elevation_ft: Optional[float] = None
    label: Optional[str] = None


class RoutePoint(NamedTuple):
    """Dense output point. Serializes as ``[lat, lng, elevation_ft]``."""

    lat: float
    lng: float
    elevation_ft: float


class RouteMetadata(BaseModel):
    route_name: str = DEFAULT_ROUTE_NAME
    location: str = DEFAULT_LOCATION
    confidence: float = DEFAULT_CONFIDENCE
    notes: str = ""
    total_miles_estimate: Optional[float] = None
    turn_by_turn: List[str] = Field(default_factory=list)
    is_loop: bool = False

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, v: float) -> float:
        if not math.isfinite(v):
            return DEFAULT_CONFIDENCE
        return min(1.0, max(0.0, v))


class BBoxWGS84(BaseModel):
    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float


class RouteResult(BaseModel):
    route_name: str
    location: str
    confidence: float = Field(ge=0, le=1)
    notes: str
    total_miles_estimate: float = Field(ge=0)
    turn_by_turn: List[str]
    is_loop: bool = False
    geometry_source: GeometrySource
    point_count: int = Field(ge=2)
    bbox_wgs84: BBoxWGS84
    waypoints: List[RoutePoint]

    @model_validator(mode="after")
    def validate_points(self):
        if self.point_count != len(self.waypoints):
            raise ValueError("point_count must equal len(waypoints)")
        if len(self.waypoints) < 2:
            raise ValueError("Route must have at least 2 points")
        for p in self.waypoints:
            if not all(math.isfinite(v) for v in p):
                raise ValueError(f"Route point is not finite: {tuple(p)}")
        return self


class ExtractRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image: Optional[str] = None
    media_type: Optional[str] = Field(default=None, alias="mediaType")


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    raw: Optional[str] = None
    notes: Optional[str] = None

# path: route-extract-api/route_extract/services/errors.py

from __future__ import annotations

from typing import Optional


class RouteExtractionError(Exception):
    pass


class InvalidWaypoints(RouteExtractionError, ValueError):
    pass


class InsufficientWaypoints(InvalidWaypoints):
    pass


class MalformedWaypoint(InvalidWaypoints):
    def __init__(self, index: int, reason: str):
        super().__init__(f"Waypoint {index} is malformed: {reason}")
        self.index = index


class OracleError(RouteExtractionError):
    """Upstream failure of the image-understanding call. Never retried."""

    def __init__(self, message: str, status_code: int = 502, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class OracleResponseError(OracleError):
    def __init__(self, message: str, raw: str):
        super().__init__(message, status_code=502)
        self.raw = raw[:500]


class SnappingUnavailable(RouteExtractionError):
    """Routing engine could not produce usable geometry; triggers fallback."""

# path: route-extract-api/route_extract/services/waypoint_validator.py

from __future__ import annotations

from typing import Any, List, Optional, Tuple
import math

from route_extract.models.route_models import Waypoint
from route_extract.services.errors import InsufficientWaypoints, MalformedWaypoint


LAT_KEYS = ("lat", "latitude")
LNG_KEYS = ("lng", "lon", "longitude")
ELEVATION_KEYS = ("elevation_ft", "elevationFeet", "elevation")


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _first_key(entry: dict, keys: Tuple[str, ...]) -> Any:
    for k in keys:
        if k in entry:
            return entry[k]
    return None


def _raw_coords(entry: Any) -> Tuple[Any, Any, Any, Any]:
    """(lat, lng, elevation, label) as found in a dict or [lat, lng, elev] entry."""
    if isinstance(entry, dict):
        return (
            _first_key(entry, LAT_KEYS),
            _first_key(entry, LNG_KEYS),
            _first_key(entry, ELEVATION_KEYS),
            entry.get("label"),
        )
    if isinstance(entry, (list, tuple)) and len(entry) >= 2:
        elev = entry[2] if len(entry) >= 3 else None
        return entry[0], entry[1], elev, None
    return None, None, None, None


def finite_float(v: Any) -> Optional[float]:
    """``float(v)`` for a finite JSON number, otherwise None.

    JSON integers can be too large for a float; those count as not finite.
    """
    if not _is_number(v):
        return None
    try:
        f = float(v)
    except OverflowError:
        return None
    return f if math.isfinite(f) else None


def validate_waypoints(raw: Any) -> List[Any]:
    """Gate before any geometry work.

    Returns ``raw`` untouched when it holds at least two entries, each with a
    finite numeric latitude in [-90, 90] and longitude in [-180, 180].
    """
    if not isinstance(raw, list) or len(raw) < 2:
        count = len(raw) if isinstance(raw, list) else 0
        raise InsufficientWaypoints(f"At least 2 waypoints required, got {count}")

    for i, entry in enumerate(raw):
        lat, lng, _, _ = _raw_coords(entry)
        if not _is_number(lat) or not _is_number(lng):
            raise MalformedWaypoint(i, "latitude/longitude must be numeric")
        lat_f = finite_float(lat)
        lng_f = finite_float(lng)
        if lat_f is None or lng_f is None:
            raise MalformedWaypoint(i, "latitude/longitude must be finite")
        if not (-90.0 <= lat_f <= 90.0):
            raise MalformedWaypoint(i, f"lat out of range [-90,90]: {lat_f}")
        if not (-180.0 <= lng_f <= 180.0):
            raise MalformedWaypoint(i, f"lng out of range [-180,180]: {lng_f}")
    return raw


def to_waypoints(raw: Any) -> List[Waypoint]:
    validate_waypoints(raw)
    out = []
    for entry in raw:
        lat, lng, elev, label = _raw_coords(entry)
        out.append(
            Waypoint(
                lat=float(lat),
                lng=float(lng),
                elevation_ft=finite_float(elev),
                label=label if isinstance(label, str) else None,
            )
        )
    return out

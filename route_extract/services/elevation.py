# path: route-extract-api/route_extract/services/elevation.py

from __future__ import annotations

from typing import List, Sequence, Tuple

from route_extract.config import DEFAULT_ELEVATION_FT
from route_extract.models.route_models import RoutePoint, Waypoint
from route_extract.utils.geo import planar_distance_deg


def nearest_waypoint_elevation(lat: float, lng: float, waypoints: Sequence[Waypoint], default_elevation_ft: float = DEFAULT_ELEVATION_FT) -> float:
    # Strict < keeps the first-seen waypoint on ties
    best_d = float("inf")
    best_elev = default_elevation_ft
    for wp in waypoints:
        d = planar_distance_deg(lat, lng, wp.lat, wp.lng)
        if d < best_d:
            best_d = d
            best_elev = wp.elevation_ft if wp.elevation_ft is not None else default_elevation_ft
    return best_elev


def smooth_elevations(elevations: Sequence[float]) -> List[float]:
    """3-tap moving average over interior points.

    Reads neighbours from the input snapshot, never from values already
    smoothed in this pass. Endpoints are returned as-is.
    """
    src = list(elevations)
    out = list(src)
    for i in range(1, len(src) - 1):
        out[i] = (src[i - 1] + src[i] + src[i + 1]) / 3
    return out


def estimate_elevations(
    geometry_latlng: Sequence[Tuple[float, float]],
    waypoints: Sequence[Waypoint],
    default_elevation_ft: float = DEFAULT_ELEVATION_FT,
) -> List[RoutePoint]:
    raw = [nearest_waypoint_elevation(lat, lng, waypoints, default_elevation_ft) for lat, lng in geometry_latlng]
    smoothed = smooth_elevations(raw)
    return [RoutePoint(float(lat), float(lng), elev) for (lat, lng), elev in zip(geometry_latlng, smoothed)]

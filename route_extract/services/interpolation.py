# path: route-extract-api/route_extract/services/interpolation.py

from __future__ import annotations

from typing import Callable, List
import math

from route_extract.config import DEFAULT_ELEVATION_FT, MAX_ROUTE_POINTS, MIN_SEGMENT_STEPS, STEP_SPACING_DEG
from route_extract.models.route_models import RoutePoint, Waypoint
from route_extract.utils.geo import lerp_point, planar_distance_deg


def interpolate_polyline(points: List[RoutePoint], steps_for: Callable[[RoutePoint, RoutePoint], int]) -> List[RoutePoint]:
    """
    Emits ``steps_for(a, b)`` points per segment (start inclusive, end
    exclusive), then the final point exactly once.
    """
    if len(points) < 2:
        return list(points)

    out: List[RoutePoint] = []
    for i in range(len(points) - 1):
        a = points[i]
        b = points[i + 1]
        steps = max(1, int(steps_for(a, b)))
        for s in range(steps):
            out.append(RoutePoint(*lerp_point(a, b, s / steps)))
    out.append(points[-1])
    return out


def segment_steps(distance_deg: float, spacing_deg: float = STEP_SPACING_DEG, min_steps: int = MIN_SEGMENT_STEPS) -> int:
    # Round half up
    return max(min_steps, int(math.floor(distance_deg / spacing_deg + 0.5)))


def waypoints_to_points(waypoints: List[Waypoint], default_elevation_ft: float = DEFAULT_ELEVATION_FT) -> List[RoutePoint]:
    return [
        RoutePoint(
            wp.lat,
            wp.lng,
            wp.elevation_ft if wp.elevation_ft is not None else default_elevation_ft,
        )
        for wp in waypoints
    ]


def fallback_interpolate(
    waypoints: List[Waypoint],
    spacing_deg: float = STEP_SPACING_DEG,
    min_steps: int = MIN_SEGMENT_STEPS,
    default_elevation_ft: float = DEFAULT_ELEVATION_FT,
    max_points: int = MAX_ROUTE_POINTS,
) -> List[RoutePoint]:
    """Dense polyline straight from the waypoints, no network involved.

    When the summed step counts would exceed ``max_points`` every segment is
    scaled down proportionally, never below ``min_steps``.
    """
    anchors = waypoints_to_points(waypoints, default_elevation_ft)
    steps = [
        segment_steps(planar_distance_deg(a.lat, a.lng, b.lat, b.lng), spacing_deg, min_steps)
        for a, b in zip(anchors, anchors[1:])
    ]
    total = sum(steps)
    if total + 1 > max_points:
        scale = (max_points - 1) / total
        steps = [max(min_steps, int(s * scale)) for s in steps]

    per_segment = iter(steps)
    return interpolate_polyline(anchors, lambda a, b: next(per_segment))

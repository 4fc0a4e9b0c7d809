# path: route-extract-api/route_extract/services/density.py

from __future__ import annotations

from typing import List
import math

from route_extract.config import MIN_ANIMATION_POINTS, MIN_RESAMPLE_TARGET, RESAMPLE_FACTOR
from route_extract.models.route_models import RoutePoint
from route_extract.services.interpolation import interpolate_polyline


def pick_target_count(current: int, min_target: int = MIN_RESAMPLE_TARGET, factor: int = RESAMPLE_FACTOR) -> int:
    return max(min_target, current * factor)


def normalize_density(
    points: List[RoutePoint],
    min_points: int = MIN_ANIMATION_POINTS,
    min_target: int = MIN_RESAMPLE_TARGET,
    factor: int = RESAMPLE_FACTOR,
) -> List[RoutePoint]:
    """
    Returns ``points`` unchanged at or above ``min_points``; otherwise
    re-interpolates every segment with a uniform step count so the result
    holds at least the target count. Never drops a point.
    """
    n = len(points)
    if n >= min_points or n < 2:
        return points

    target = pick_target_count(n, min_target, factor)
    steps = math.ceil(target / (n - 1))
    return interpolate_polyline(points, lambda a, b: steps)

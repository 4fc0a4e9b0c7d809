# path: route-extract-api/route_extract/utils/geo.py

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple
import math


METERS_PER_MILE = 1609.344

# (lat, lng, elevation_ft)
Point3 = Tuple[float, float, float]


def planar_distance_deg(a_lat: float, a_lng: float, b_lat: float, b_lng: float) -> float:
    # Euclidean norm over raw degree deltas. Step counts and the nearest-waypoint
    # lookup are tuned against this, so it is not a geodesic distance.
    return math.sqrt((b_lat - a_lat) ** 2 + (b_lng - a_lng) ** 2)


def lerp_point(a: Point3, b: Point3, t: float) -> Point3:
    return (
        a[0] + (b[0] - a[0]) * t,
        a[1] + (b[1] - a[1]) * t,
        a[2] + (b[2] - a[2]) * t,
    )


def bbox_wgs84(points_latlng: Iterable[Sequence[float]]) -> Dict[str, float]:
    lats = []
    lngs = []
    for p in points_latlng:
        lats.append(p[0])
        lngs.append(p[1])
    return {
        "min_lat": min(lats),
        "min_lng": min(lngs),
        "max_lat": max(lats),
        "max_lng": max(lngs),
    }


def haversine_m(a_lat: float, a_lng: float, b_lat: float, b_lng: float) -> float:
    # Display-only distance; geometry decisions use planar_distance_deg.
    r = 6371000.0
    phi1 = math.radians(a_lat)
    phi2 = math.radians(b_lat)
    dphi = math.radians(b_lat - a_lat)
    dlmb = math.radians(b_lng - a_lng)

    s = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * r * math.asin(math.sqrt(s))


def polyline_length_m(points_latlng: List[Sequence[float]]) -> float:
    total = 0.0
    for i in range(1, len(points_latlng)):
        a = points_latlng[i - 1]
        b = points_latlng[i]
        total += haversine_m(a[0], a[1], b[0], b[1])
    return total


def polyline_length_miles(points_latlng: List[Sequence[float]]) -> float:
    return polyline_length_m(points_latlng) / METERS_PER_MILE

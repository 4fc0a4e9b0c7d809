# path: route-extract-api/route_extract/services/reconstruction.py

from __future__ import annotations

from typing import Any, List, Optional, Protocol, Sequence, Tuple
import logging

from route_extract.config import Settings
from route_extract.models.route_models import (
    BBoxWGS84,
    GeometrySource,
    RouteMetadata,
    RoutePoint,
    RouteResult,
    Waypoint,
)
from route_extract.services.density import normalize_density
from route_extract.services.elevation import estimate_elevations
from route_extract.services.errors import SnappingUnavailable
from route_extract.services.interpolation import fallback_interpolate
from route_extract.services.waypoint_validator import to_waypoints
from route_extract.utils.geo import bbox_wgs84, polyline_length_miles

logger = logging.getLogger(__name__)


class RoadSnapper(Protocol):
    def snap(self, waypoints: Sequence[Waypoint]) -> List[Tuple[float, float]]:
        ...


class ReconstructionPipeline:
    """
    validate -> snap to roads (or interpolate) -> elevations -> density -> result

    Holds only configuration and collaborators; every call works on its own
    locals, so one instance can serve concurrent requests.
    """

    def __init__(self, settings: Settings, snapper: Optional[RoadSnapper] = None):
        self.settings = settings
        self.snapper = snapper

    def _snapped_geometry(self, waypoints: List[Waypoint]) -> Optional[List[Tuple[float, float]]]:
        if not self.settings.snap_to_roads or self.snapper is None:
            return None
        try:
            geometry = self.snapper.snap(waypoints)
        except SnappingUnavailable as e:
            logger.warning("Road snapping unavailable: %s", e)
            return None
        if len(geometry) < self.settings.min_snapped_points:
            logger.warning(
                "Road snapping returned too few points (%d < %d)",
                len(geometry),
                self.settings.min_snapped_points,
            )
            return None
        return geometry

    def build_points(self, waypoints: List[Waypoint]) -> Tuple[List[RoutePoint], GeometrySource]:
        s = self.settings
        geometry = self._snapped_geometry(waypoints)
        if geometry is not None:
            points = estimate_elevations(geometry, waypoints, s.default_elevation_ft)
            source: GeometrySource = "osrm"
        else:
            logger.info("Using waypoint interpolation fallback")
            points = fallback_interpolate(
                waypoints, s.step_spacing_deg, s.min_segment_steps, s.default_elevation_ft, s.max_route_points
            )
            source = "interpolated"

        points = normalize_density(points, s.min_animation_points, s.min_resample_target, s.resample_factor)
        return points, source

    def reconstruct(self, raw_waypoints: Any, metadata: Optional[RouteMetadata] = None) -> RouteResult:
        waypoints = to_waypoints(raw_waypoints)
        meta = metadata or RouteMetadata()

        points, source = self.build_points(waypoints)
        logger.info("Final route: %d points (%s)", len(points), source)

        miles = meta.total_miles_estimate
        if miles is None:
            miles = round(polyline_length_miles(points), 2)

        return RouteResult(
            route_name=meta.route_name,
            location=meta.location,
            confidence=meta.confidence,
            notes=meta.notes,
            total_miles_estimate=miles,
            turn_by_turn=meta.turn_by_turn,
            is_loop=meta.is_loop,
            geometry_source=source,
            point_count=len(points),
            bbox_wgs84=BBoxWGS84(**bbox_wgs84(points)),
            waypoints=points,
        )

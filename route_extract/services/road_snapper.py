# path: route-extract-api/route_extract/services/road_snapper.py

"""
Road snapping through the OSRM ``/route`` service.

Every waypoint goes into one request, in travel order, as ``lng,lat`` pairs
joined by ``;``. OSRM answers with GeoJSON geometry (``[lng, lat]``), which is
flipped to ``(lat, lng)`` here. The engine routes along the nearest rideable
path, so the geometry need not pass exactly through each waypoint.

Any failure (transport error, timeout, non-``Ok`` code, malformed body)
raises ``SnappingUnavailable``; the pipeline then falls back to
straight-line interpolation.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple
import logging
import math

import requests

from route_extract.config import OSRM_BASE_URL, OSRM_PROFILE, OSRM_TIMEOUT_S
from route_extract.models.route_models import Waypoint
from route_extract.services.errors import SnappingUnavailable

logger = logging.getLogger(__name__)


def build_route_url(waypoints: Sequence[Waypoint], base_url: str = OSRM_BASE_URL, profile: str = OSRM_PROFILE) -> str:
    coords = ";".join(f"{wp.lng},{wp.lat}" for wp in waypoints)
    return f"{base_url}/route/v1/{profile}/{coords}"


def parse_route_geometry(data: Any) -> List[Tuple[float, float]]:
    """Pulls the first route's geometry out of an OSRM reply as (lat, lng)."""
    if not isinstance(data, dict):
        raise SnappingUnavailable("OSRM response is not a JSON object")
    code = data.get("code")
    if code != "Ok":
        raise SnappingUnavailable(f"OSRM returned code={code!r}: {data.get('message', '')}")

    routes = data.get("routes")
    if not isinstance(routes, list) or not routes:
        raise SnappingUnavailable("OSRM returned no routes")

    try:
        coords = routes[0]["geometry"]["coordinates"]
    except (KeyError, TypeError):
        raise SnappingUnavailable("OSRM route has no GeoJSON geometry")
    if not isinstance(coords, list):
        raise SnappingUnavailable("OSRM geometry coordinates are not a list")

    out = []
    for c in coords:
        try:
            lng, lat = float(c[0]), float(c[1])
        except (TypeError, ValueError, IndexError):
            raise SnappingUnavailable(f"Malformed OSRM coordinate: {c!r}")
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise SnappingUnavailable(f"Non-finite OSRM coordinate: {c!r}")
        out.append((lat, lng))
    return out


class OsrmRoadSnapper:
    def __init__(
        self,
        base_url: str = OSRM_BASE_URL,
        profile: str = OSRM_PROFILE,
        timeout_s: float = OSRM_TIMEOUT_S,
    ):
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.timeout_s = timeout_s

    def snap(self, waypoints: Sequence[Waypoint]) -> List[Tuple[float, float]]:
        url = build_route_url(waypoints, self.base_url, self.profile)
        params = {"overview": "full", "geometries": "geojson", "steps": "false"}

        logger.info("Routing through OSRM (%s) with %d waypoints", self.profile, len(waypoints))
        try:
            resp = requests.get(url, params=params, timeout=self.timeout_s)
            data = resp.json()
        except requests.exceptions.Timeout as e:
            raise SnappingUnavailable(f"OSRM timed out after {self.timeout_s}s: {e}")
        except requests.exceptions.RequestException as e:
            raise SnappingUnavailable(f"OSRM request failed: {e}")
        except ValueError as e:
            raise SnappingUnavailable(f"OSRM returned invalid JSON (HTTP {resp.status_code}): {e}")

        geometry = parse_route_geometry(data)
        logger.info("OSRM returned %d points", len(geometry))
        return geometry

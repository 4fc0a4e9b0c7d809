import dataclasses

import pytest

from conftest import SCENARIO_WAYPOINTS, FakeSnapper, straight_geometry
from route_extract.models.route_models import RouteMetadata
from route_extract.services.errors import InsufficientWaypoints, MalformedWaypoint
from route_extract.services.reconstruction import ReconstructionPipeline


def test_fallback_when_engine_unavailable(settings, unavailable_snapper):
    result = ReconstructionPipeline(settings, unavailable_snapper).reconstruct(SCENARIO_WAYPOINTS)

    assert len(unavailable_snapper.calls) == 1
    assert result.geometry_source == "interpolated"
    assert tuple(result.waypoints[0]) == (40.00, -105.00, 5000)
    assert tuple(result.waypoints[-1]) == (40.02, -105.01, 5300)
    assert result.point_count == len(result.waypoints) >= settings.min_animation_points


def test_snapped_geometry_is_kept_when_dense(settings):
    geometry = straight_geometry(150)
    snapper = FakeSnapper(geometry=geometry)
    result = ReconstructionPipeline(settings, snapper).reconstruct(SCENARIO_WAYPOINTS)

    assert result.geometry_source == "osrm"
    assert result.point_count == 150
    assert [(p.lat, p.lng) for p in result.waypoints] == geometry
    assert result.waypoints[0].elevation_ft == 5000
    assert result.waypoints[-1].elevation_ft == 5300
    for p in result.waypoints:
        assert 5000 <= p.elevation_ft <= 5300


def test_snapped_waypoints_passed_in_order(settings):
    snapper = FakeSnapper(geometry=straight_geometry(150))
    ReconstructionPipeline(settings, snapper).reconstruct(SCENARIO_WAYPOINTS)
    assert [(w.lat, w.lng) for w in snapper.calls[0]] == [(r[0], r[1]) for r in SCENARIO_WAYPOINTS]


def test_short_snapped_geometry_falls_back(settings):
    snapper = FakeSnapper(geometry=straight_geometry(9))
    result = ReconstructionPipeline(settings, snapper).reconstruct(SCENARIO_WAYPOINTS)
    assert result.geometry_source == "interpolated"


def test_sparse_snapped_geometry_is_densified(settings):
    snapper = FakeSnapper(geometry=straight_geometry(20))
    result = ReconstructionPipeline(settings, snapper).reconstruct(SCENARIO_WAYPOINTS)
    assert result.geometry_source == "osrm"
    assert result.point_count >= 150
    assert (result.waypoints[-1].lat, result.waypoints[-1].lng) == straight_geometry(20)[-1]


def test_snapping_disabled_never_calls_engine(settings):
    snapper = FakeSnapper(geometry=straight_geometry(150))
    pipeline = ReconstructionPipeline(dataclasses.replace(settings, snap_to_roads=False), snapper)
    result = pipeline.reconstruct(SCENARIO_WAYPOINTS)
    assert snapper.calls == []
    assert result.geometry_source == "interpolated"


def test_metadata_defaults_and_distance_estimate(settings, unavailable_snapper):
    result = ReconstructionPipeline(settings, unavailable_snapper).reconstruct(SCENARIO_WAYPOINTS)
    assert result.route_name == "Extracted Route"
    assert result.location == "Unknown"
    assert result.confidence == 0.5
    assert result.notes == ""
    assert result.turn_by_turn == []
    # ~1.1 km + ~1.4 km
    assert 1.4 < result.total_miles_estimate < 1.7


def test_metadata_is_carried_through(settings, unavailable_snapper):
    meta = RouteMetadata(route_name="Flagstaff", location="Boulder, CO", confidence=0.9, notes="n", total_miles_estimate=12.0, turn_by_turn=["Go"])
    result = ReconstructionPipeline(settings, unavailable_snapper).reconstruct(SCENARIO_WAYPOINTS, meta)
    assert (result.route_name, result.location, result.confidence, result.notes) == ("Flagstaff", "Boulder, CO", 0.9, "n")
    assert result.total_miles_estimate == 12.0
    assert result.turn_by_turn == ["Go"]


def test_bbox_covers_route(settings, unavailable_snapper):
    result = ReconstructionPipeline(settings, unavailable_snapper).reconstruct(SCENARIO_WAYPOINTS)
    assert result.bbox_wgs84.min_lat == 40.00
    assert result.bbox_wgs84.max_lat == 40.02
    assert result.bbox_wgs84.min_lng == -105.01
    assert result.bbox_wgs84.max_lng == -105.00


def test_invalid_waypoints_raise(settings, unavailable_snapper):
    pipeline = ReconstructionPipeline(settings, unavailable_snapper)
    with pytest.raises(InsufficientWaypoints):
        pipeline.reconstruct([[40.0, -105.0, 5000]])
    with pytest.raises(MalformedWaypoint):
        pipeline.reconstruct([[40.0, -105.0], {"lat": None, "lng": -105.0}])
    assert unavailable_snapper.calls == []


def test_serializes_points_as_triples(settings, unavailable_snapper):
    result = ReconstructionPipeline(settings, unavailable_snapper).reconstruct(SCENARIO_WAYPOINTS)
    body = result.model_dump(mode="json")
    assert body["waypoints"][0] == [40.0, -105.0, 5000.0]
    assert body["point_count"] == len(body["waypoints"])


@pytest.mark.parametrize(
    "raw",
    [
        [[1e200, 0, 5000], [-1e200, 0, 5000]],
        [[4000, -105, 5000], [-4000, -105, 5000]],
        [[10**400, -105.0], [40.0, -105.0]],
    ],
)
def test_impossible_coordinates_rejected_before_interpolation(settings, unavailable_snapper, raw):
    with pytest.raises(MalformedWaypoint):
        ReconstructionPipeline(settings, unavailable_snapper).reconstruct(raw)
    assert unavailable_snapper.calls == []

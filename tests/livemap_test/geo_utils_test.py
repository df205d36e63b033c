import pytest

from livemap.geo_utils import (
    bounding_box_spans,
    calculate_bearing,
    coord_distance,
    destination_point,
    haversine_distance,
    offset_coord,
    routes_extent,
)
from livemap.models import BoundingBox, CameraRegion, Coord, Placemark

from conftest import make_route


def test_haversine_known_distance():
    # Ankara Kızılay -> Ulus, roughly 2.6 km
    d = haversine_distance(39.9208, 32.8541, 39.9420, 32.8543)
    assert 2300 < d < 2500


def test_haversine_one_degree_latitude():
    assert haversine_distance(0, 0, 1, 0) == pytest.approx(111_195, rel=1e-3)


def test_bearing_cardinal_points():
    assert calculate_bearing(0, 0, 1, 0) == pytest.approx(0)
    assert calculate_bearing(0, 0, 0, 1) == pytest.approx(90)
    assert calculate_bearing(0, 0, -1, 0) == pytest.approx(180)


@pytest.mark.parametrize("bearing", [0, 45, 90, 200, 315])
def test_destination_point_distance(bearing):
    origin = Coord(39.92409, 32.845382)
    target = destination_point(origin, bearing, 100)
    assert coord_distance(origin, target) == pytest.approx(100, abs=0.01)


def test_destination_point_wraps_antimeridian():
    target = destination_point(Coord(0, 179.9999), 90, 1000)
    assert -180 <= target.lon < -179


def test_offset_coord_matches_spans():
    origin = Coord(39.92, 32.85)
    moved = offset_coord(origin, 500, 0)
    assert coord_distance(origin, moved) == pytest.approx(500, rel=1e-3)


def test_camera_region_bounding_box_roundtrips_spans():
    region = CameraRegion(Coord(39.92, 32.85), 10_000, 10_000)
    lat_span, lon_span = bounding_box_spans(region.bounding_box)
    assert lat_span == pytest.approx(10_000, rel=1e-3)
    assert lon_span == pytest.approx(10_000, rel=1e-2)


def test_routes_extent():
    a = make_route([(39.90, 32.80), (39.91, 32.85)])
    b = make_route([(39.89, 32.82), (39.95, 32.83)])

    assert routes_extent([a, b]) == BoundingBox(39.89, 32.80, 39.95, 32.85)
    assert routes_extent([]) is None


def test_routes_extent_across_antimeridian():
    a = make_route([(10.0, 179.0), (10.5, 179.5)])
    b = make_route([(10.5, -179.5), (11.0, -179.0)])

    bbox = routes_extent([a, b])
    assert bbox == BoundingBox(10.0, 179.0, 11.0, 181.0)
    assert bbox.center.lat == pytest.approx(10.5)
    assert abs(bbox.center.lon) == pytest.approx(180.0)

    _, lon_span = bounding_box_spans(bbox)
    assert lon_span < 250_000


def test_route_coords_are_lat_lon():
    route = make_route([(39.90, 32.80), (39.91, 32.85)])
    assert route.coords == (Coord(39.90, 32.80), Coord(39.91, 32.85))


def test_coord_rejects_out_of_range():
    with pytest.raises(ValueError):
        Coord(91, 0)
    with pytest.raises(ValueError):
        Coord(0, 181)


def test_placemark_format():
    assert Placemark("10", "Main St", "Springfield").format_address() == "10 Main St Springfield"
    assert Placemark().format_address() == "  "

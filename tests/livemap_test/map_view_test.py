import pytest

from livemap.geo_utils import bounding_box_spans
from livemap.map_config import MapConfig
from livemap.map_view import MIN_SPAN_M, MapView
from livemap.models import BoundingBox, Coord
from livemap.ui_context import UIContext

from conftest import make_route


@pytest.fixture
def view():
    return MapView(UIContext(), MapConfig(fit_padding_ratio=0.2))


def test_region_events_arrive_on_ui_context(view):
    events = []
    view.subscribe_region_changed(lambda v, animated: events.append((v.center_coordinate, animated)))

    view.set_region(Coord(39.92, 32.85), 1000, 1000, animated=False)
    assert events == []

    view._ui.run_pending()
    assert events == [(Coord(39.92, 32.85), False)]


def test_set_center_keeps_span(view):
    view.set_region(Coord(39.92, 32.85), 1200, 800)
    view.set_center(Coord(39.93, 32.86))

    assert view.region.lat_span_m == 1200
    assert view.region.lon_span_m == 800
    assert view.center_coordinate == Coord(39.93, 32.86)


def test_unsubscribe_stops_events(view):
    events = []
    unsubscribe = view.subscribe_region_changed(lambda v, a: events.append(a))
    unsubscribe()
    view.set_center(Coord(1.0, 1.0))
    view._ui.run_pending()

    assert events == []


def test_visible_rect_is_padded(view):
    bbox = BoundingBox(39.90, 32.80, 39.95, 32.90)
    view.set_visible_rect(bbox)

    lat_span, lon_span = bounding_box_spans(bbox)
    assert view.center_coordinate == bbox.center
    assert view.region.lat_span_m == pytest.approx(lat_span * 1.2)
    assert view.region.lon_span_m == pytest.approx(lon_span * 1.2)


def test_tiny_rect_has_minimum_span(view):
    view.set_visible_rect(BoundingBox(39.9, 32.8, 39.9, 32.8))

    assert view.region.lat_span_m == MIN_SPAN_M
    assert view.region.lon_span_m == MIN_SPAN_M


def test_overlays(view):
    a = make_route([(39.90, 32.80), (39.91, 32.81)])
    b = make_route([(39.92, 32.82), (39.93, 32.83)])
    view.add_overlay(a)
    view.add_overlay(b)
    view.remove_overlays([a])
    assert view.overlays == (b,)

    view.remove_overlays()
    assert view.overlays == ()


def test_renderer_required(view):
    with pytest.raises(LookupError):
        view.renderer_for(make_route([(0, 0), (1, 1)]))

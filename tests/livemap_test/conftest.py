from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import pytest
from shapely.geometry import LineString

from livemap.alerts import LoggingAlertPresenter
from livemap.coordinator import LiveMapCoordinator
from livemap.directions import DirectionsHandle
from livemap.location import SimulatedLocationProvider
from livemap.map_config import MapConfig
from livemap.map_view import MapView
from livemap.models import AuthorizationState, Coord, Placemark, Route, RouteRequest
from livemap.ui_context import UIContext


# Sıhhiye, Ankara
ORIGIN = Coord(39.92409, 32.845382)


def make_route(points: Sequence[Tuple[float, float]], distance_m: float = 1000.0, name: str = "") -> Route:
    """points are (lat, lon)."""
    return Route(
        polyline=LineString([(lon, lat) for lat, lon in points]),
        distance_m=distance_m,
        duration_s=distance_m / 10.0,
        name=name,
    )


class FakeGeocoder:
    """Records requests; the test decides when and how each one completes."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Coord, object]] = []
        self.cancelled: List[int] = []
        self.cancel_calls = 0

    @property
    def is_geocoding(self) -> bool:
        return bool(self.calls) and (len(self.calls) - 1) not in self.cancelled

    def reverse_geocode(self, coord, completion) -> None:
        self.calls.append((coord, completion))

    def cancel_geocode(self) -> None:
        self.cancel_calls += 1
        if self.calls:
            self.cancelled.append(len(self.calls) - 1)

    def complete(self, index: int = -1, placemark: Optional[Placemark] = None, error=None,
                 honor_cancel: bool = True) -> None:
        index = index % len(self.calls)
        if honor_cancel and index in self.cancelled:
            return
        self.calls[index][1](placemark, error)


class FakeDirections:
    def __init__(self) -> None:
        self.requests: List[RouteRequest] = []
        self.handles: List[DirectionsHandle] = []
        self._completions = []

    def calculate(self, request, completion) -> DirectionsHandle:
        handle = DirectionsHandle(request)
        self.requests.append(request)
        self.handles.append(handle)
        self._completions.append(completion)
        return handle

    def complete(self, index: int = -1, routes=None, error=None, honor_cancel: bool = True) -> None:
        handle = self.handles[index]
        if honor_cancel and not handle._claim():
            return
        self._completions[index](routes or [], error)


@dataclass
class Screen:
    ui: UIContext
    provider: SimulatedLocationProvider
    map_view: MapView
    geocoder: FakeGeocoder
    directions: FakeDirections
    presenter: LoggingAlertPresenter
    coordinator: LiveMapCoordinator
    config: MapConfig = field(default_factory=MapConfig)

    def drain(self) -> int:
        return self.ui.run_pending()


def build_screen(
    state: AuthorizationState = AuthorizationState.AUTHORIZED_WHEN_IN_USE,
    position: Optional[Coord] = ORIGIN,
    services_enabled: bool = True,
    grant_on_request: Optional[AuthorizationState] = None,
) -> Screen:
    config = MapConfig()
    ui = UIContext()
    provider = SimulatedLocationProvider(
        ui,
        services_enabled=services_enabled,
        initial_state=state,
        grant_on_request=grant_on_request,
    )
    if position is not None:
        provider.update_location(position)
    map_view = MapView(ui, config)
    geocoder = FakeGeocoder()
    directions = FakeDirections()
    presenter = LoggingAlertPresenter(echo=False)
    coordinator = LiveMapCoordinator(map_view, provider, geocoder, directions, presenter, ui, config)
    return Screen(ui, provider, map_view, geocoder, directions, presenter, coordinator, config)


@pytest.fixture
def screen() -> Screen:
    """Authorized screen, loaded and settled on ORIGIN."""
    s = build_screen()
    s.coordinator.load()
    s.drain()
    return s

# coordinator.py
# Public entry point for the live map screen.
# Glue between the map surface, the location provider, the geocoder and the
# directions service. Every method here runs on the UI context.

import logging
from typing import Callable, List, Optional

from . import alerts as alert_catalog
from .alerts import AlertPresenter
from .directions import DirectionsHandle, DirectionsService
from .geo_utils import coord_distance, routes_extent
from .geocoder import ReverseGeocoder
from .location import LocationProvider
from .map_config import MapConfig
from .map_view import MapView
from .models import AuthorizationState, Coord, Placemark, PolylineStyle, Route, RouteRequest
from .ui_context import UIContext

logger = logging.getLogger(__name__)

AddressCallback = Callable[[str], None]


class LiveMapCoordinator:
    """
    Screen controller for the live map.

    Typical lifecycle:
        coordinator = LiveMapCoordinator(map_view, provider, geocoder, directions, presenter, ui)
        coordinator.load()

        # UI loop:
        ui.run_pending()

        # "GO" button:
        coordinator.request_route()

        coordinator.dismiss()

    Args:
        map_view:   Map surface showing the camera and route overlays.
        location:   Location provider (authorization + position stream).
        geocoder:   Reverse geocoder for the address label.
        directions: Directions service for the route preview.
        alerts:     Presenter for user-facing messages.
        ui:         The serial context owning all screen state.
        config:     Optional MapConfig; defaults to MapConfig().
    """

    def __init__(
        self,
        map_view: MapView,
        location: LocationProvider,
        geocoder: ReverseGeocoder,
        directions: DirectionsService,
        alerts: AlertPresenter,
        ui: UIContext,
        config: Optional[MapConfig] = None,
    ) -> None:
        self.config = config or MapConfig()
        self.map_view = map_view
        self.location = location
        self.geocoder = geocoder
        self.directions = directions
        self.alerts = alerts
        self._ui = ui

        self._dismissed = False
        self._tracking = False
        self._centered = False
        self._geocode_issued = False
        self._anchor: Optional[Coord] = None
        self._geocode_generation = 0
        self._pending_routes: List[DirectionsHandle] = []
        self._route_generation = 0
        self._address = ""
        self._address_listeners: List[AddressCallback] = []
        self._unsubscribers: List[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Screen lifecycle
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Wire up event subscriptions and check location services."""
        self._dismissed = False
        self.map_view.renderer = self.render_overlay
        self._unsubscribers = [
            self.location.subscribe_authorization(self.on_authorization_changed),
            self.location.subscribe_location(self._on_location_updated),
            self.map_view.subscribe_region_changed(self._on_region_changed),
        ]
        self.check_location_services()

    def dismiss(self) -> None:
        """Cancel outstanding work and drop every subscription."""
        self._dismissed = True
        self._cancel_pending_routes()
        self._route_generation += 1
        self._geocode_generation += 1
        self.geocoder.cancel_geocode()
        if self._tracking:
            self.location.stop_updating_location()
            self._tracking = False
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        logger.info("Map screen dismissed.")

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def displayed_address(self) -> str:
        return self._address

    @property
    def anchor(self) -> Optional[Coord]:
        return self._anchor

    @property
    def is_tracking(self) -> bool:
        return self._tracking

    @property
    def pending_route_requests(self) -> List[DirectionsHandle]:
        return list(self._pending_routes)

    def subscribe_address(self, callback: AddressCallback) -> Callable[[], None]:
        self._address_listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._address_listeners:
                self._address_listeners.remove(callback)
        return unsubscribe

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def check_location_services(self) -> None:
        if not self.location.location_services_enabled():
            self.alerts.present(alert_catalog.LOCATION_SERVICES_OFF)
            return
        self.on_authorization_changed(self.location.authorization_state)

    def on_authorization_changed(self, state: AuthorizationState) -> None:
        if self._dismissed:
            return
        logger.info(f"Location authorization: {state.value}")
        if state == AuthorizationState.AUTHORIZED_WHEN_IN_USE:
            self.start_tracking()
        elif state in (AuthorizationState.DENIED, AuthorizationState.RESTRICTED):
            self.alerts.present(alert_catalog.LOCATION_ACCESS_DENIED)
        elif state == AuthorizationState.NOT_DETERMINED:
            self.location.request_when_in_use_authorization()
        # AUTHORIZED_ALWAYS: nothing to do

    # ------------------------------------------------------------------
    # Position tracking
    # ------------------------------------------------------------------

    def start_tracking(self) -> None:
        """Show and follow the user. Safe to call more than once."""
        if self._tracking or self._dismissed:
            return
        self._tracking = True
        self.map_view.shows_user_location = True
        self._center_on_user()
        self.location.start_updating_location()
        self._anchor = self.map_view.center_coordinate
        logger.info(f"Tracking started, anchor {self._anchor}")

    def _center_on_user(self) -> bool:
        position = self.location.location
        if position is None:
            return False
        span = self.config.region_span_m
        self.map_view.set_region(position, span, span, animated=True)
        self._centered = True
        return True

    def _on_location_updated(self, coord: Coord) -> None:
        # Tracking began before the first fix: center on it once it arrives.
        if self._dismissed or not self._tracking or self._centered:
            return
        if self._center_on_user():
            # The anchor only follows the camera here while no geocode was issued.
            if not self._geocode_issued:
                self._anchor = self.map_view.center_coordinate
            logger.info(f"First fix {coord}, camera centered.")

    # ------------------------------------------------------------------
    # Address label
    # ------------------------------------------------------------------

    def _on_region_changed(self, map_view: MapView, animated: bool) -> None:
        self.on_camera_region_changed()

    def on_camera_region_changed(self) -> None:
        if self._dismissed:
            return
        center = self.map_view.center_coordinate
        if self._anchor is None:
            return
        if coord_distance(center, self._anchor) <= self.config.geocode_threshold_m:
            return

        self.geocoder.cancel_geocode()
        self._anchor = center
        self._geocode_issued = True
        self._geocode_generation += 1
        generation = self._geocode_generation
        logger.debug(f"Reverse geocoding {center} (#{generation})")

        def completion(placemark: Optional[Placemark], error: Optional[Exception]) -> None:
            self._ui.post(self._apply_placemark, generation, placemark, error)

        self.geocoder.reverse_geocode(center, completion)

    def _apply_placemark(self, generation: int, placemark: Optional[Placemark], error: Optional[Exception]) -> None:
        if generation != self._geocode_generation:
            logger.debug(f"Discarding stale geocode #{generation}")
            return
        if error is not None or placemark is None:
            logger.debug(f"No address for geocode #{generation}: {error}")
            return
        self._address = placemark.format_address()
        for callback in list(self._address_listeners):
            callback(self._address)

    # ------------------------------------------------------------------
    # Route preview
    # ------------------------------------------------------------------

    def request_route(self) -> Optional[DirectionsHandle]:
        """
        Route from the device position to the map center ("GO" button).

        Returns:
            Handle of the issued request, or None when no position is known
            or the screen has been dismissed.
        """
        if self._dismissed:
            return None
        position = self.location.location
        if position is None:
            self.alerts.present(alert_catalog.LOCATION_UNAVAILABLE)
            return None

        request = RouteRequest(
            source=position,
            destination=self.map_view.center_coordinate,
            transport_type=self.config.transport_type,
            requests_alternate_routes=self.config.requests_alternate_routes,
        )
        self.map_view.remove_overlays()
        self._cancel_pending_routes()

        self._route_generation += 1
        generation = self._route_generation

        def completion(routes: List[Route], error: Optional[Exception]) -> None:
            self._ui.post(self._apply_routes, generation, routes, error)

        logger.info(f"Requesting route {request.source} -> {request.destination}")
        handle = self.directions.calculate(request, completion)
        self._pending_routes.append(handle)
        return handle

    def _cancel_pending_routes(self) -> None:
        for handle in self._pending_routes:
            handle.cancel()
        self._pending_routes.clear()

    def _apply_routes(self, generation: int, routes: List[Route], error: Optional[Exception]) -> None:
        if generation != self._route_generation:
            logger.debug(f"Discarding stale route result #{generation}")
            return
        self._pending_routes.clear()
        if error is not None or not routes:
            logger.debug(f"No route drawn: {error or 'empty result'}")
            return

        self.map_view.remove_overlays()
        for route in routes:
            self.map_view.add_overlay(route)
        self.map_view.set_visible_rect(routes_extent(routes), animated=True)
        logger.info(f"Drew {len(routes)} route(s); primary {int(routes[0].distance_m)} m")

    def render_overlay(self, overlay: Route) -> PolylineStyle:
        return PolylineStyle(
            stroke_color=self.config.route_stroke_color,
            line_width=self.config.route_line_width,
        )

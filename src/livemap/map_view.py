# map_view.py
# Headless map surface: camera region, route overlays and region-changed events.
# Holds screen state only; it never calls a network service.

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .geo_utils import bounding_box_spans
from .map_config import MapConfig
from .models import BoundingBox, CameraRegion, Coord, PolylineStyle, Route
from .ui_context import UIContext

logger = logging.getLogger(__name__)

RegionChangedCallback = Callable[["MapView", bool], None]
Renderer = Callable[[Route], PolylineStyle]

MIN_SPAN_M = 200.0      # fitted regions never zoom in further than this


class MapView:
    """
    In-memory model of a map widget.

    Region-changed events are posted to the UI context after every camera
    change, which is when a platform map reports them (after the move).

    Args:
        ui:             Context that receives region-changed events.
        config:         MapConfig for the fit padding.
        initial_region: Camera region before anything is centered.
    """

    def __init__(
        self,
        ui: UIContext,
        config: Optional[MapConfig] = None,
        initial_region: Optional[CameraRegion] = None,
    ) -> None:
        self.config = config or MapConfig()
        self._ui = ui
        self._region = initial_region or CameraRegion(
            center=Coord(0.0, 0.0),
            lat_span_m=self.config.region_span_m,
            lon_span_m=self.config.region_span_m,
        )
        self._overlays: List[Route] = []
        self._listeners: List[RegionChangedCallback] = []
        self.renderer: Optional[Renderer] = None
        self.shows_user_location = False

    # ------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------

    @property
    def region(self) -> CameraRegion:
        return self._region

    @property
    def center_coordinate(self) -> Coord:
        return self._region.center

    def set_region(self, center: Coord, lat_span_m: float, lon_span_m: float, animated: bool = True) -> None:
        self._region = CameraRegion(center, lat_span_m, lon_span_m)
        logger.debug(f"Camera -> {center} ({int(lat_span_m)} x {int(lon_span_m)} m)")
        self._region_did_change(animated)

    def set_center(self, center: Coord, animated: bool = True) -> None:
        """Pan without changing the span (a user drag)."""
        self.set_region(center, self._region.lat_span_m, self._region.lon_span_m, animated)

    def set_visible_rect(self, bbox: BoundingBox, animated: bool = True) -> None:
        """Move the camera so bbox is visible, with config.fit_padding_ratio around it."""
        lat_span, lon_span = bounding_box_spans(bbox)
        scale = 1.0 + self.config.fit_padding_ratio
        self.set_region(
            bbox.center,
            max(lat_span * scale, MIN_SPAN_M),
            max(lon_span * scale, MIN_SPAN_M),
            animated,
        )

    def subscribe_region_changed(self, callback: RegionChangedCallback) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)
        return unsubscribe

    def _region_did_change(self, animated: bool) -> None:
        for callback in list(self._listeners):
            self._ui.post(callback, self, animated)

    # ------------------------------------------------------------------
    # Overlays
    # ------------------------------------------------------------------

    @property
    def overlays(self) -> Tuple[Route, ...]:
        return tuple(self._overlays)

    def add_overlay(self, overlay: Route) -> None:
        self._overlays.append(overlay)

    def remove_overlays(self, overlays: Optional[Sequence[Route]] = None) -> None:
        """Remove the given overlays, or all of them when none are given."""
        if overlays is None:
            self._overlays.clear()
            return
        targets = [id(o) for o in overlays]
        self._overlays = [o for o in self._overlays if id(o) not in targets]

    def renderer_for(self, overlay: Route) -> PolylineStyle:
        if self.renderer is None:
            raise LookupError("No overlay renderer installed")
        return self.renderer(overlay)

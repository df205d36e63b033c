# directions.py
# Route calculation against an OSRM server.
# Sole responsibility: talk to OSRM via HTTP and return normalized Route objects.
# Encapsulates OSRM-specific details:
#   coordinate formatting (lon,lat)
#   URL construction (/route/v1/{profile}/...)
#   polyline decoding into shapely geometries

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

import polyline
import requests
from shapely.geometry import LineString

from .map_config import MapConfig
from .models import Coord, Route, RouteRequest, TransportType

logger = logging.getLogger(__name__)

# completion(routes, error): routes is empty when nothing was found or on error
DirectionsCompletion = Callable[[List[Route], Optional[Exception]], None]

OSRM_PROFILES: Dict[TransportType, str] = {
    TransportType.AUTOMOBILE: "driving",
    TransportType.WALKING:    "walking",
    TransportType.CYCLING:    "cycling",
}

# OSRM codes meaning "valid request, nothing to drive"
NO_ROUTE_CODES = frozenset({"NoRoute", "NoSegment"})


class RoutingError(Exception):
    """Custom exception for directions service errors."""
    pass


class DirectionsHandle:
    """
    One in-flight route calculation.

    cancel() guarantees the completion is not called afterwards.
    """

    def __init__(self, request: RouteRequest) -> None:
        self.request = request
        self._lock = threading.Lock()
        self._cancelled = False
        self._done = False
        self._future: Optional[Future] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    def cancel(self) -> None:
        with self._lock:
            if self._done or self._cancelled:
                return
            self._cancelled = True
            if self._future is not None:
                self._future.cancel()
        logger.debug(f"Directions {self.request.source} -> {self.request.destination} cancelled.")

    def _attach(self, future: Future) -> None:
        with self._lock:
            self._future = future
            if self._cancelled:
                future.cancel()

    def _claim(self) -> bool:
        """Mark the handle finished; False if it was cancelled first."""
        with self._lock:
            if self._cancelled:
                return False
            self._done = True
            return True


class DirectionsService(Protocol):
    def calculate(self, request: RouteRequest, completion: DirectionsCompletion) -> DirectionsHandle: ...


def route_from_osrm(payload: Dict[str, Any]) -> Optional[Route]:
    """
    Convert one entry of an OSRM ``routes`` array (polyline geometry) to a Route.

    Returns:
        None if the geometry has fewer than two distinct points.
    """
    points = polyline.decode(payload.get("geometry") or "")
    if len(points) < 2:
        return None
    line = LineString([(lon, lat) for lat, lon in points])
    if line.length == 0:
        return None
    legs = payload.get("legs") or [{}]
    return Route(
        polyline=line,
        distance_m=float(payload.get("distance", 0.0)),
        duration_s=float(payload.get("duration", 0.0)),
        name=legs[0].get("summary", ""),
    )


class OSRMDirections:
    """
    OSRM Adapter / Client

    - Convert internal (lat, lon) -> OSRM (lon,lat)
    - Run /route on a worker pool
    - Return normalized Route objects to the completion callback

    Args:
        config:   MapConfig with osrm_base_url and request_timeout_s.
        executor: Optional pool to run requests on; one is created otherwise.
    """

    def __init__(self, config: Optional[MapConfig] = None, executor: Optional[ThreadPoolExecutor] = None) -> None:
        self.config = config or MapConfig()
        if not self.config.osrm_base_url:
            raise ValueError("OSRM base URL not set.")
        self.base_url = self.config.osrm_base_url.rstrip("/")
        self.timeout = self.config.request_timeout_s
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="directions"
        )
        self._owns_executor = executor is None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def format_coordinates(coords: Sequence[Coord]) -> str:
        """Convert coordinates to OSRM format 'lon,lat;lon,lat;...'"""
        return ";".join(f"{c.lon},{c.lat}" for c in coords)

    # ------------------------------------------------------------------
    # Blocking API
    # ------------------------------------------------------------------

    def fetch_routes(self, request: RouteRequest) -> List[Route]:
        """
        Call the OSRM /route endpoint for request.

        Returns:
            Routes in OSRM order (primary first); empty if OSRM found none.

        Raises:
            RoutingError: HTTP failure, malformed payload, or an OSRM error code.
        """
        if request.source == request.destination:
            raise ValueError("Route source and destination are the same point.")

        profile = OSRM_PROFILES[request.transport_type]
        coordinates = self.format_coordinates([request.source, request.destination])
        url = f"{self.base_url}/route/v1/{profile}/{coordinates}"

        try:
            response = requests.get(
                url,
                params={
                    "overview": "full",
                    "geometries": "polyline",
                    "alternatives": "true" if request.requests_alternate_routes else "false",
                    "steps": "false",
                },
                timeout=self.timeout,
            )
            data = response.json()
        except requests.RequestException as e:
            raise RoutingError(f"OSRM request failed: {e}") from e
        except ValueError as e:
            raise RoutingError(f"OSRM returned invalid JSON (HTTP {response.status_code})") from e

        code = data.get("code")
        if code in NO_ROUTE_CODES:
            logger.info(f"OSRM found no route: {data.get('message', code)}")
            return []
        if code != "Ok":
            raise RoutingError(f"OSRM error: {data.get('message', code or 'Unknown error')}")

        routes = []
        for entry in data.get("routes", []):
            route = route_from_osrm(entry)
            if route is not None:
                routes.append(route)
        return routes

    # ------------------------------------------------------------------
    # Async API
    # ------------------------------------------------------------------

    def calculate(self, request: RouteRequest, completion: DirectionsCompletion) -> DirectionsHandle:
        handle = DirectionsHandle(request)
        future = self._executor.submit(self.fetch_routes, request)
        handle._attach(future)
        future.add_done_callback(lambda f: self._finish(handle, f, completion))
        return handle

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    @staticmethod
    def _finish(handle: DirectionsHandle, future: Future, completion: DirectionsCompletion) -> None:
        if future.cancelled() or not handle._claim():
            return
        error = future.exception()
        if error is not None:
            logger.warning(f"Route calculation failed: {error}")
            completion([], error)
            return
        completion(future.result(), None)

# geocoder.py
# Reverse geocoder: point to best-effort street address.
# Requests run on a worker pool; completions arrive on a worker thread.

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional, Protocol

import requests

from .map_config import MapConfig
from .models import Coord, Placemark

logger = logging.getLogger(__name__)

# completion(placemark, error): placemark is None when nothing was found or on error
GeocodeCompletion = Callable[[Optional[Placemark], Optional[Exception]], None]

# Nominatim address keys that can stand in for "city", preferred first
CITY_KEYS = ("city", "town", "village", "hamlet", "municipality")


class GeocodingError(Exception):
    """Transport or payload failure while reverse geocoding."""
    pass


class ReverseGeocoder(Protocol):
    @property
    def is_geocoding(self) -> bool: ...

    def reverse_geocode(self, coord: Coord, completion: GeocodeCompletion) -> None: ...

    def cancel_geocode(self) -> None: ...


def placemark_from_nominatim(payload: Dict[str, Any]) -> Optional[Placemark]:
    """
    Map a Nominatim /reverse jsonv2 payload to a Placemark.

    Returns:
        None for "Unable to geocode" style answers or payloads without an address.
    """
    if not payload or "error" in payload:
        return None
    address = payload.get("address")
    if not address:
        return None
    city = next((address[key] for key in CITY_KEYS if address.get(key)), None)
    return Placemark(
        street_number=address.get("house_number"),
        street_name=address.get("road") or address.get("pedestrian"),
        city=city,
        postcode=address.get("postcode"),
        country=address.get("country"),
    )


class _Job:
    def __init__(self, coord: Coord, completion: GeocodeCompletion) -> None:
        self.coord = coord
        self.completion = completion
        self.cancelled = False
        self.future: Optional[Future] = None


class NominatimReverseGeocoder:
    """
    Reverse geocoder backed by a Nominatim server.

    Only one request is in flight at a time; starting a new one cancels the
    previous one. A cancelled request never calls its completion.

    Args:
        config:   MapConfig with nominatim_base_url, user_agent, timeout, language.
        executor: Optional pool to run requests on; one is created otherwise.
    """

    def __init__(self, config: Optional[MapConfig] = None, executor: Optional[ThreadPoolExecutor] = None) -> None:
        self.config = config or MapConfig()
        if not self.config.nominatim_base_url:
            raise ValueError("Nominatim base URL not set.")
        self.base_url = self.config.nominatim_base_url.rstrip("/")
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="geocode"
        )
        self._owns_executor = executor is None
        self._lock = threading.Lock()
        self._job: Optional[_Job] = None
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": self.config.user_agent,
            "Accept-Language": self.config.language,
        })

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def lookup(self, coord: Coord) -> Optional[Placemark]:
        """Blocking reverse geocode. Raises GeocodingError on failure."""
        try:
            response = self._session.get(
                f"{self.base_url}/reverse",
                params={
                    "lat": coord.lat,
                    "lon": coord.lon,
                    "format": "jsonv2",
                    "addressdetails": 1,
                    "zoom": 18,
                },
                timeout=self.config.request_timeout_s,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise GeocodingError(f"Reverse geocode failed for {coord}: {e}") from e
        except ValueError as e:
            raise GeocodingError(f"Invalid geocoder response for {coord}: {e}") from e
        return placemark_from_nominatim(payload)

    # ------------------------------------------------------------------
    # Async API
    # ------------------------------------------------------------------

    @property
    def is_geocoding(self) -> bool:
        with self._lock:
            return self._job is not None and not self._job.cancelled

    def reverse_geocode(self, coord: Coord, completion: GeocodeCompletion) -> None:
        job = _Job(coord, completion)
        with self._lock:
            if self._job is not None:
                self._cancel(self._job)
            self._job = job
        job.future = self._executor.submit(self.lookup, coord)
        job.future.add_done_callback(lambda future: self._finish(job, future))

    def cancel_geocode(self) -> None:
        with self._lock:
            if self._job is not None:
                self._cancel(self._job)
                self._job = None

    def close(self) -> None:
        self.cancel_geocode()
        if self._owns_executor:
            self._executor.shutdown(wait=False)
        self._session.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _cancel(job: _Job) -> None:
        job.cancelled = True
        if job.future is not None:
            job.future.cancel()
        logger.debug(f"Geocode for {job.coord} cancelled.")

    def _finish(self, job: _Job, future: Future) -> None:
        with self._lock:
            if job.cancelled or future.cancelled():
                return
            if self._job is job:
                self._job = None

        error = future.exception()
        if error is not None:
            logger.warning(f"{error}")
            job.completion(None, error)
            return
        job.completion(future.result(), None)

# models.py
# Shared data structures and enums used across all modules.

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from shapely.geometry import LineString


# ---------------------------------------------------------------------------
# Coordinate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coord:
    """Immutable geographic coordinate."""
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"Longitude out of range: {self.lon}")


# ---------------------------------------------------------------------------
# Map geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lat/lon rectangle."""
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    @property
    def center(self) -> Coord:
        # max_lon may run past 180 for boxes that cross the antimeridian
        lon = (self.min_lon + self.max_lon) / 2
        return Coord((self.min_lat + self.max_lat) / 2, (lon + 180.0) % 360.0 - 180.0)

    def union(self, other: "BoundingBox") -> "BoundingBox":
        return BoundingBox(
            min_lat=min(self.min_lat, other.min_lat),
            min_lon=min(self.min_lon, other.min_lon),
            max_lat=max(self.max_lat, other.max_lat),
            max_lon=max(self.max_lon, other.max_lon),
        )

    @staticmethod
    def from_bounds(bounds: Tuple[float, float, float, float]) -> "BoundingBox":
        """Build from shapely ``(minx, miny, maxx, maxy)`` bounds in lon/lat order."""
        min_lon, min_lat, max_lon, max_lat = bounds
        return BoundingBox(min_lat, min_lon, max_lat, max_lon)


@dataclass(frozen=True)
class CameraRegion:
    """Visible map area: a center plus north-south / east-west spans in metres."""
    center: Coord
    lat_span_m: float
    lon_span_m: float

    @property
    def bounding_box(self) -> BoundingBox:
        from .geo_utils import offset_coord

        south_west = offset_coord(self.center, -self.lat_span_m / 2, -self.lon_span_m / 2)
        north_east = offset_coord(self.center, self.lat_span_m / 2, self.lon_span_m / 2)
        return BoundingBox(south_west.lat, south_west.lon, north_east.lat, north_east.lon)


# ---------------------------------------------------------------------------
# Location services
# ---------------------------------------------------------------------------

class AuthorizationState(Enum):
    NOT_DETERMINED         = "not_determined"
    DENIED                 = "denied"
    RESTRICTED             = "restricted"
    AUTHORIZED_WHEN_IN_USE = "when_in_use"
    AUTHORIZED_ALWAYS      = "always"


# ---------------------------------------------------------------------------
# Geocoding
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Placemark:
    """Best-effort structured address returned by a reverse geocode."""
    street_number: Optional[str] = None
    street_name: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None

    def format_address(self) -> str:
        street_number = self.street_number or ""
        street_name = self.street_name or ""
        city = self.city or ""
        return f"{street_number} {street_name} {city}"


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

class TransportType(Enum):
    AUTOMOBILE = "driving"
    WALKING    = "walking"
    CYCLING    = "cycling"


@dataclass(frozen=True)
class RouteRequest:
    source: Coord
    destination: Coord
    transport_type: TransportType = TransportType.AUTOMOBILE
    requests_alternate_routes: bool = True


@dataclass
class Route:
    """One route geometry returned by the directions service."""
    polyline: LineString           # (lon, lat) vertices
    distance_m: float
    duration_s: float
    name: str = ""

    @property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_bounds(self.polyline.bounds)

    @property
    def coords(self) -> Tuple[Coord, ...]:
        return tuple(Coord(lat, lon) for lon, lat in self.polyline.coords)


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PolylineStyle:
    stroke_color: str
    line_width: float


@dataclass(frozen=True)
class Alert:
    """Single-button modal message."""
    title: str
    message: str

    def __str__(self) -> str:
        return f"{self.title}: {self.message}"

# geo_utils.py
# Pure mathematical / geographic helper functions.
# No side effects.

import math
from typing import Iterable, Optional, Tuple

from shapely.geometry import GeometryCollection, LineString

from .models import BoundingBox, Coord, Route


EARTH_RADIUS_M = 6_371_000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in metres.

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Distance in metres.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def coord_distance(a: Coord, b: Coord) -> float:
    """haversine_distance() for two Coord objects."""
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Forward azimuth (bearing) from point 1 to point 2 in degrees [0, 360).

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Bearing in degrees.
    """
    rlat1, rlon1 = math.radians(lat1), math.radians(lon1)
    rlat2, rlon2 = math.radians(lat2), math.radians(lon2)
    d_lon = rlon2 - rlon1
    y = math.sin(d_lon) * math.cos(rlat2)
    x = math.cos(rlat1) * math.sin(rlat2) - math.sin(rlat1) * math.cos(rlat2) * math.cos(d_lon)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def destination_point(origin: Coord, bearing_deg: float, distance_m: float) -> Coord:
    """
    Point reached by travelling distance_m along a great circle.

    Args:
        origin:      Start coordinate.
        bearing_deg: Initial bearing, 0 = north, 90 = east.
        distance_m:  Distance in metres.

    Returns:
        Destination coordinate, longitude normalised to [-180, 180).
    """
    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    phi1 = math.radians(origin.lat)
    lambda1 = math.radians(origin.lon)

    phi2 = math.asin(
        math.sin(phi1) * math.cos(delta)
        + math.cos(phi1) * math.sin(delta) * math.cos(theta)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    lon = (math.degrees(lambda2) + 540) % 360 - 180
    return Coord(math.degrees(phi2), lon)


def offset_coord(origin: Coord, north_m: float, east_m: float) -> Coord:
    """Shift a coordinate by local north/east offsets (equirectangular, fine for map spans)."""
    d_lat = math.degrees(north_m / EARTH_RADIUS_M)
    cos_lat = max(math.cos(math.radians(origin.lat)), 1e-12)
    d_lon = math.degrees(east_m / (EARTH_RADIUS_M * cos_lat))
    lat = max(-90.0, min(90.0, origin.lat + d_lat))
    lon = (origin.lon + d_lon + 540) % 360 - 180
    return Coord(lat, lon)


def bounding_box_spans(bbox: BoundingBox) -> Tuple[float, float]:
    """(north-south, east-west) extent of a box in metres, measured through its center."""
    center = bbox.center
    lat_span = haversine_distance(bbox.min_lat, center.lon, bbox.max_lat, center.lon)
    lon_span = haversine_distance(center.lat, bbox.min_lon, center.lat, bbox.max_lon)
    return lat_span, lon_span


def routes_extent(routes: Iterable[Route]) -> Optional[BoundingBox]:
    """Bounding box covering every route geometry, or None when there are none."""
    lines = [route.polyline for route in routes]
    if not lines:
        return None
    bounds = GeometryCollection(lines).bounds
    if bounds[2] - bounds[0] > 180.0:
        # Crosses the antimeridian: measure western longitudes past +180.
        lines = [
            LineString([(lon + 360.0 if lon < 0 else lon, lat) for lon, lat in line.coords])
            for line in lines
        ]
        bounds = GeometryCollection(lines).bounds
    return BoundingBox.from_bounds(bounds)

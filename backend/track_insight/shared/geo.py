"""
Geographic utility functions.

This is the SINGLE SOURCE OF TRUTH for geographic calculations.
DO NOT duplicate these functions elsewhere.
"""
import math
from typing import Iterable, Protocol, Tuple

# Earth radius in kilometers
EARTH_RADIUS_KM = 6371.0

Bounds = Tuple[Tuple[float, float], Tuple[float, float]]

EMPTY_BOUNDS: Bounds = ((0.0, 0.0), (0.0, 0.0))


class HasCoordinates(Protocol):
    """Anything with lat/lon in degrees (GeoPoint, schemas, ...)."""
    lat: float
    lon: float


def haversine(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def initial_bearing(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate forward azimuth from the first point towards the second.

    Args:
        lat1, lon1: Start point coordinates (degrees)
        lat2, lon2: Destination coordinates (degrees)

    Returns:
        Bearing in degrees, normalized to [0, 360).
        0 when both points coincide (direction undefined).
    """
    if lat1 == lat2 and lon1 == lon2:
        return 0.0

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lon = math.radians(lon2 - lon1)

    y = math.sin(delta_lon) * math.cos(lat2_rad)
    x = (
        math.cos(lat1_rad) * math.sin(lat2_rad) -
        math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lon)
    )
    bearing = (math.degrees(math.atan2(y, x)) + 360.0) % 360.0

    # (-tiny + 360) % 360 can round up to exactly 360.0
    if bearing >= 360.0:
        return 0.0
    return bearing


def distance_km(a: HasCoordinates, b: HasCoordinates) -> float:
    """Haversine distance between two points, in kilometers."""
    return haversine(a.lat, a.lon, b.lat, b.lon)


def initial_bearing_degrees(a: HasCoordinates, b: HasCoordinates) -> float:
    """Initial bearing from point a towards point b, in [0, 360)."""
    return initial_bearing(a.lat, a.lon, b.lat, b.lon)


def calculate_total_distance(points: Iterable[HasCoordinates]) -> float:
    """
    Calculate total distance for a route.

    Args:
        points: Ordered points with lat/lon

    Returns:
        Total distance in kilometers
    """
    total = 0.0
    previous = None

    for point in points:
        if previous is not None:
            total += distance_km(previous, point)
        previous = point

    return total


def calculate_bounds(points: Iterable[HasCoordinates]) -> Bounds:
    """
    Coordinate-wise bounding box of the points.

    Returns:
        ((min_lat, min_lon), (max_lat, max_lon)), or ((0, 0), (0, 0))
        when there are no points.
    """
    min_lat, max_lat = 90.0, -90.0
    min_lon, max_lon = 180.0, -180.0
    seen = False

    for p in points:
        seen = True
        min_lat = min(min_lat, p.lat)
        max_lat = max(max_lat, p.lat)
        min_lon = min(min_lon, p.lon)
        max_lon = max(max_lon, p.lon)

    if not seen:
        return EMPTY_BOUNDS
    return ((min_lat, min_lon), (max_lat, max_lon))

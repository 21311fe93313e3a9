"""
Great-circle distance and "nearby" helpers.

The bounding box is a cheap rectangular pre-filter used before the exact
haversine computation when scanning many points around one center.
"""

from math import atan2, cos, radians, sin, sqrt
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .models import GeoPoint

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.0


def distance_km(p1: GeoPoint, p2: GeoPoint) -> float:
    """
    Haversine distance between two points.

    Args:
        p1: First point (degrees)
        p2: Second point (degrees)

    Returns:
        Distance in kilometers
    """
    lat1, lon1 = radians(p1.latitude), radians(p1.longitude)
    lat2, lon2 = radians(p2.latitude), radians(p2.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    a = min(1.0, a)
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def is_valid_coordinates(latitude: Any, longitude: Any) -> bool:
    for value in (latitude, longitude):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if value != value:  # NaN
            return False
    return -90 <= latitude <= 90 and -180 <= longitude <= 180


def bounding_box(center: GeoPoint, radius_km: float) -> Dict[str, float]:
    """
    Approximate lat/lon rectangle enclosing a circle of `radius_km`.

    Longitude degrees shrink with latitude, so the longitude span is widened
    by 1/cos(lat). At the poles the span covers every longitude.
    """
    lat_delta = radius_km / KM_PER_DEGREE_LAT
    cos_lat = cos(radians(center.latitude))
    if cos_lat <= 1e-12 or abs(center.latitude) + lat_delta >= 90:
        lon_delta = 180.0
    else:
        lon_delta = radius_km / (KM_PER_DEGREE_LAT * cos_lat)
    return {
        "min_lat": center.latitude - lat_delta,
        "max_lat": center.latitude + lat_delta,
        "min_lon": center.longitude - lon_delta,
        "max_lon": center.longitude + lon_delta,
    }


def _in_box(point: GeoPoint, box: Dict[str, float]) -> bool:
    if not box["min_lat"] <= point.latitude <= box["max_lat"]:
        return False
    if box["max_lon"] - box["min_lon"] >= 360:
        return True
    lon = point.longitude
    # Boxes that cross the antimeridian wrap around
    for shift in (0.0, 360.0, -360.0):
        if box["min_lon"] <= lon + shift <= box["max_lon"]:
            return True
    return False


def find_nearby(
    center: GeoPoint,
    items: Iterable[Any],
    radius_km: float = 50.0,
    key: Optional[Callable[[Any], Optional[GeoPoint]]] = None,
) -> List[Tuple[Any, float]]:
    """
    Items within `radius_km` of `center`, closest first.

    Args:
        center: Reference point
        items: Anything carrying a location
        radius_km: Search radius
        key: Extracts a GeoPoint from an item (default: the item itself).
            Items whose key returns None are skipped.

    Returns:
        List of (item, distance_km) tuples, distance rounded to 2 decimals
    """
    get_point = key or (lambda item: item)
    box = bounding_box(center, radius_km)
    nearby: List[Tuple[Any, float]] = []
    for item in items:
        point = get_point(item)
        if point is None or not _in_box(point, box):
            continue
        dist = distance_km(center, point)
        if dist <= radius_km:
            nearby.append((item, round(dist, 2)))
    nearby.sort(key=lambda pair: pair[1])
    return nearby


def format_distance(distance: float, show_away: bool = False) -> str:
    if distance < 1:
        formatted = f"{round(distance * 1000)} m"
    elif distance < 10:
        formatted = f"{distance:.1f} km"
    else:
        formatted = f"{round(distance)} km"
    return f"{formatted} away" if show_away else formatted

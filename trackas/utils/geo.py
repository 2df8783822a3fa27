# utils/geo.py
"""
Coordinate helpers for venue and device positions.
Covers parsing and repair of stored latitude/longitude pairs and the
haversine distance used by the eligibility check.
"""

import math
from typing import NamedTuple, Optional

EARTH_RADIUS_METERS = 6371000


class Coordinate(NamedTuple):
    lat: float
    lng: float

    def to_dict(self):
        return {'latitude': self.lat, 'longitude': self.lng}


def coerce_float(value) -> Optional[float]:
    """
    Parse a raw coordinate component.

    Accepts numbers and numeric strings (surrounding whitespace ignored).
    Returns None for None, booleans, unparsable text, NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None

    if not math.isfinite(number):
        return None

    return number


def in_range(lat, lng):
    return -90 <= lat <= 90 and -180 <= lng <= 180


def normalize_coordinates(raw_lat, raw_lng) -> Optional[Coordinate]:
    """
    Validate a stored (latitude, longitude) pair, swapping transposed values.

    The pair is swapped when latitude is out of range while longitude would
    fit as a latitude, or when longitude is out of range while latitude is
    not. When both components are out of range nothing is swapped and the
    pair is rejected.

    Args:
        raw_lat: Latitude as a number or numeric string
        raw_lng: Longitude as a number or numeric string

    Returns:
        Coordinate or None when the pair cannot be used
    """
    lat = coerce_float(raw_lat)
    lng = coerce_float(raw_lng)

    if lat is None or lng is None:
        return None

    if (abs(lat) > 90 and abs(lng) <= 90) or (abs(lat) <= 90 and abs(lng) > 180):
        lat, lng = lng, lat

    if not in_range(lat, lng):
        return None

    return Coordinate(lat, lng)


def distance_meters(coord_a, coord_b) -> float:
    """Great-circle distance in meters between two coordinates (haversine)."""
    lat1, lon1 = coord_a
    lat2, lon2 = coord_b

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    a = min(a, 1.0)  # rounding can push near-antipodal points just past 1
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def meters_to_kilometers(meters):
    return meters / 1000


def format_distance(meters):
    """Human readable distance, e.g. '850 m' or '12.34 km'."""
    if meters is None:
        return None
    if meters < 1000:
        return f"{meters:.0f} m"
    return f"{meters_to_kilometers(meters):.2f} km"


def to_wkt_point(coordinate):
    """PostGIS style geography literal for a coordinate."""
    return f"SRID=4326;POINT({coordinate.lng} {coordinate.lat})"

"""
Great-circle distance helpers for radius search.
"""

from math import atan2, cos, radians, sin, sqrt

from .schema import Coordinate

EARTH_RADIUS_MILES = 3959
DEFAULT_RADIUS_MILES = 10.0


def distance_miles(a: Coordinate, b: Coordinate) -> float:
    """Compute Haversine distance in miles between two coordinates."""
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlat = radians(b.lat - a.lat)
    dlon = radians(b.lon - a.lon)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return EARTH_RADIUS_MILES * 2 * atan2(sqrt(h), sqrt(1 - h))


def within_radius(distance: float, radius_miles: float = DEFAULT_RADIUS_MILES) -> bool:
    """Inclusive radius test on the unrounded distance."""
    return distance <= radius_miles


def round_distance(distance: float) -> float:
    """Round a distance to one decimal place for display."""
    return round(distance, 1)

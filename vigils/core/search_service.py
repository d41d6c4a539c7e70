"""
Radius search: vigils within a fixed distance of a zipcode, nearest first.
"""

from typing import List

from . import config
from .geo import distance_miles, round_distance, within_radius
from .geocoder import CoordinateResolver, is_valid_zipcode
from .schema import RankedVigil
from .store import VigilStore


class InvalidZipcodeError(Exception):
    """Search zipcode is malformed or has no known coordinates."""
    pass


def find_near(zipcode: str, store: VigilStore, resolver: CoordinateResolver,
              radius_miles: float = None) -> List[RankedVigil]:
    """
    Find vigils within `radius_miles` of a zipcode.

    Records whose own zipcode cannot be resolved are left out rather than
    failing the whole search. Results are stably sorted by unrounded
    distance, so ties keep store order.

    Raises:
        InvalidZipcodeError: if the search zipcode is malformed or unresolvable.
    """
    if radius_miles is None:
        radius_miles = config.SEARCH_RADIUS_MILES

    if not is_valid_zipcode(zipcode):
        raise InvalidZipcodeError(f"Invalid zipcode format: {zipcode}")

    origin = resolver.resolve(zipcode)
    if origin is None:
        raise InvalidZipcodeError(f"Coordinates not found for zipcode: {zipcode}")

    matches = []
    for record in store.list_all():
        coordinate = resolver.resolve(record.zipcode)
        if coordinate is None:
            continue

        distance = distance_miles(origin, coordinate)
        if within_radius(distance, radius_miles):
            matches.append((distance, record))

    matches.sort(key=lambda match: match[0])
    return [RankedVigil(record=record, distance=round_distance(distance)) for distance, record in matches]

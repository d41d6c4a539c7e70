"""
Zipcode to coordinate resolution backed by the Zippopotam.us API.

Resolved coordinates are memoized per zipcode for the lifetime of the
process. Failures are never cached so a later request can retry.
"""

import re
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

import requests

from . import config
from .schema import Coordinate
from util.logging import logger

ZIPCODE_PATTERN = re.compile(r"^\d{5}$")


class GeocodingError(Exception):
    """Raised when the upstream zipcode API cannot answer."""
    pass


def is_valid_zipcode(zipcode: str) -> bool:
    """Check for a 5-digit US zipcode."""
    return bool(zipcode) and ZIPCODE_PATTERN.match(zipcode) is not None


class CoordinateCache(ABC):
    """Cache interface so expiry or size limits can be added without touching callers."""

    @abstractmethod
    def get(self, zipcode: str) -> Optional[Coordinate]:
        pass

    @abstractmethod
    def set(self, zipcode: str, coordinate: Coordinate) -> None:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class InMemoryCoordinateCache(CoordinateCache):
    """Unbounded, never-invalidated cache. Zipcode locations are treated as immutable."""

    def __init__(self):
        self._entries: Dict[str, Coordinate] = {}
        self._lock = threading.Lock()

    def get(self, zipcode: str) -> Optional[Coordinate]:
        with self._lock:
            return self._entries.get(zipcode)

    def set(self, zipcode: str, coordinate: Coordinate) -> None:
        with self._lock:
            self._entries.setdefault(zipcode, coordinate)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class ZippopotamClient:
    """Thin client for https://api.zippopotam.us/us/{zipcode}."""

    def __init__(self, base_url: str = None, timeout: float = None, session: requests.Session = None):
        self.base_url = (base_url or config.ZIPCODE_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT_SEC
        self.session = session or requests.Session()

    def fetch_place_info(self, zipcode: str) -> Dict[str, Any]:
        """
        Fetch the raw place document for a zipcode.

        Raises:
            GeocodingError: on network errors, timeouts, non-2xx responses or
                a body that is not JSON.
        """
        url = f"{self.base_url}/{zipcode}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise GeocodingError(f"Zipcode lookup failed for {zipcode}: {e}") from e

        if not response.ok:
            raise GeocodingError(f"Zipcode lookup for {zipcode} returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise GeocodingError(f"Zipcode lookup for {zipcode} returned malformed JSON") from e

    def lookup(self, zipcode: str) -> Coordinate:
        """Return the coordinate of the first place listed for a zipcode."""
        data = self.fetch_place_info(zipcode)
        try:
            place = data["places"][0]
            return Coordinate(lat=float(place["latitude"]), lon=float(place["longitude"]))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise GeocodingError(f"Zipcode lookup for {zipcode} returned no usable place") from e


class CoordinateResolver:
    """
    Resolve zipcodes to coordinates through a cache.

    Callers validate zipcode format before calling `resolve`.
    """

    def __init__(self, lookup: Callable[[str], Coordinate] = None, cache: CoordinateCache = None):
        if lookup is None:
            lookup = ZippopotamClient().lookup
        self._lookup = lookup
        self.cache = cache if cache is not None else InMemoryCoordinateCache()

    def resolve(self, zipcode: str) -> Optional[Coordinate]:
        """Return the coordinate for a zipcode, or None when it cannot be resolved."""
        cached = self.cache.get(zipcode)
        if cached is not None:
            logger.log_geocode_lookup(zipcode, "success", cache_hit=True)
            return cached

        try:
            coordinate = self._lookup(zipcode)
        except (GeocodingError, requests.RequestException) as e:
            logger.log_geocode_lookup(zipcode, "failed", error=str(e))
            return None

        if coordinate is None:
            logger.log_geocode_lookup(zipcode, "failed", error="no coordinate returned")
            return None

        self.cache.set(zipcode, coordinate)
        logger.log_geocode_lookup(zipcode, "success")
        return coordinate

# services/geocoding_service.py
"""
Address lookup for venues without a usable stored coordinate.
Queries a Nominatim-compatible search endpoint and returns the first
candidate, re-validated like any stored coordinate.
"""

import logging

import requests

from trackas.utils.geo import normalize_coordinates

logger = logging.getLogger('geocoding_service')


class GeocodingService:
    """Free-text location name to coordinate resolver."""

    def __init__(self, base_url, timeout=5, user_agent='trackas-attendance/1.0', session=None):
        self.base_url = base_url
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = session or requests.Session()

    def lookup(self, text):
        """
        Issue a single search request.

        Returns:
            list: Raw candidates as returned by the service

        Raises:
            requests.RequestException: transport failure or non-2xx status
            ValueError: body is not JSON
        """
        response = self.session.get(
            self.base_url,
            params={'q': text, 'format': 'json', 'limit': 1},
            headers={'User-Agent': self.user_agent},
            timeout=self.timeout
        )
        response.raise_for_status()
        data = response.json()
        return data if isinstance(data, list) else []

    def resolve(self, location_name):
        """
        Resolve a location name to a Coordinate.

        Args:
            location_name: Free-text venue name

        Returns:
            Coordinate or None when the name cannot be resolved
        """
        if not location_name or not str(location_name).strip():
            return None

        try:
            candidates = self.lookup(str(location_name).strip())
        except requests.Timeout:
            logger.warning(f"Geocoding timed out after {self.timeout}s for '{location_name}'")
            return None
        except requests.RequestException as e:
            logger.warning(f"Geocoding request failed for '{location_name}': {str(e)}")
            return None
        except ValueError as e:
            logger.warning(f"Geocoding returned a malformed body for '{location_name}': {str(e)}")
            return None

        if not candidates:
            logger.info(f"No geocoding candidates for '{location_name}'")
            return None

        first = candidates[0]
        if not isinstance(first, dict):
            logger.warning(f"Malformed geocoding candidate for '{location_name}': {first!r}")
            return None

        raw_lng = first.get('lon', first.get('lng'))
        coordinate = normalize_coordinates(first.get('lat'), raw_lng)
        if coordinate is None:
            logger.warning(f"Geocoding candidate out of range for '{location_name}': {first!r}")
            return None

        logger.info(f"Resolved '{location_name}' to {coordinate.lat}, {coordinate.lng}")
        return coordinate

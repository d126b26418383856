"""OpenCage reverse geocoding for waypoint display names."""

import logging
from typing import Optional

import requests

from tripwx.config import DEFAULT_HTTP_TIMEOUT_S

logger = logging.getLogger(__name__)


def coordinate_label(lat: float, lng: float) -> str:
    """Fallback name for a position without a known place."""
    return f"{lat:.4f}, {lng:.4f}"


class OpenCageGeocoder:
    """
    Resolve coordinates to short place names with the OpenCage API.

    Failures never propagate: the coordinate label is returned instead, so
    a route report can always be produced.

    Example:
        geocoder = OpenCageGeocoder(api_key="...")
        geocoder.reverse(48.8566, 2.3522)  # "Paris"
    """

    BASE_URL = "https://api.opencagedata.com/geocode/v1/json"
    # Most specific first
    PLACE_KEYS = ("city", "town", "village", "hamlet", "suburb", "municipality", "county", "state")

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_S,
    ):
        """
        Args:
            api_key: OpenCage API key
            session: Optional requests.Session for dependency injection (testing)
            timeout: HTTP request timeout in seconds
        """
        self._api_key = api_key
        self._session = session or requests.Session()
        self._timeout = timeout

    def reverse(self, lat: float, lng: float) -> str:
        """
        Best place name for a position.

        Returns:
            City/town/village... name, the formatted address, or
            "lat, lng" when nothing could be resolved
        """
        params = {
            "q": f"{lat}+{lng}",
            "key": self._api_key,
            "no_annotations": 1,
            "limit": 1,
        }
        try:
            response = self._session.get(self.BASE_URL, params=params, timeout=self._timeout)
            response.raise_for_status()
            results = response.json().get("results") or []
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.warning("Reverse geocoding failed for (%.4f, %.4f): %s", lat, lng, e)
            return coordinate_label(lat, lng)

        if not results:
            return coordinate_label(lat, lng)
        return self._place_name(results[0]) or coordinate_label(lat, lng)

    def _place_name(self, result: dict) -> Optional[str]:
        components = result.get("components") or {}
        for key in self.PLACE_KEYS:
            if components.get(key):
                return components[key]
        return result.get("formatted")

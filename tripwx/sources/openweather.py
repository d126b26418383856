"""OpenWeather One Call API source for multi-resolution forecasts."""

import logging
from typing import Any, Dict, Optional

import requests

from tripwx.config import DEFAULT_HTTP_TIMEOUT_S
from tripwx.errors import WeatherSourceError

logger = logging.getLogger(__name__)


class OpenWeatherSource:
    """
    Fetch current, minutely, hourly and daily forecasts from OpenWeather.

    Returns the raw One Call payload; band selection and normalization are
    done by `tripwx.forecast`.

    Example:
        source = OpenWeatherSource(api_key="...")
        payload = source.fetch_onecall(48.85, 2.35)
        print(payload['current']['temp'])
    """

    BASE_URL = "https://api.openweathermap.org/data/3.0/onecall"
    USER_AGENT = "tripwx/0.1 (route weather)"

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_S,
        base_url: str = BASE_URL,
    ):
        """
        Args:
            api_key: OpenWeather API key
            session: Optional requests.Session for dependency injection (testing)
            timeout: HTTP request timeout in seconds
            base_url: One Call endpoint
        """
        self._api_key = api_key
        self._session = session or requests.Session()
        self._timeout = timeout
        self._base_url = base_url
        self._session.headers.setdefault("User-Agent", self.USER_AGENT)

    def fetch_onecall(self, lat: float, lng: float) -> Dict[str, Any]:
        """
        Fetch the One Call payload for a position, metric units.

        Args:
            lat: Latitude in decimal degrees
            lng: Longitude in decimal degrees

        Returns:
            Decoded JSON payload

        Raises:
            WeatherSourceError: On transport errors, HTTP errors or a body
                that is not a JSON object
        """
        params = {
            "lat": lat,
            "lon": lng,
            "units": "metric",
            "appid": self._api_key,
        }
        try:
            response = self._session.get(self._base_url, params=params, timeout=self._timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise WeatherSourceError(f"Weather API error for ({lat}, {lng}): {e}") from e
        except ValueError as e:
            raise WeatherSourceError(f"Weather API returned invalid JSON for ({lat}, {lng})") from e

        if not isinstance(payload, dict):
            raise WeatherSourceError(f"Unexpected weather payload for ({lat}, {lng})", details=payload)
        logger.debug("Fetched One Call payload for (%.4f, %.4f)", lat, lng)
        return payload

#!/usr/bin/env python3

"""
Configuration for tripwx.

Thresholds are module constants; credentials and tunables come from the
environment through `Settings.from_env()`.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from tripwx.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Forecast band horizons (seconds ahead of the feed's "now")
CURRENT_WINDOW_S = 300
MINUTELY_HORIZON_S = 3600
MINUTELY_SLOW_SOURCE_S = 1800
HOURLY_HORIZON_S = 48 * 3600
HOUR_SWITCH_MINUTES = 30
RAIN_WINDOW_MINUTES = 15

# Route aggregation
DEDUP_DISTANCE_M = 2000
WAYPOINT_SPACING_M = 1000
MIN_WAYPOINTS = 3

# Forecast cache
DEFAULT_CACHE_TTL_S = 300
CACHE_COORD_DECIMALS = 4

# HTTP
DEFAULT_HTTP_TIMEOUT_S = 15
DEFAULT_MAX_WORKERS = 8


def _env_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}", details=name)


@dataclass
class Settings:
    """Runtime settings for the weather pipeline."""

    openweather_api_key: Optional[str] = None
    opencage_api_key: Optional[str] = None
    cache_ttl_s: float = DEFAULT_CACHE_TTL_S
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    max_workers: int = DEFAULT_MAX_WORKERS

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Load settings from environment variables.

        Args:
            env: Mapping to read from (defaults to os.environ)

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        env = os.environ if env is None else env
        settings = cls(
            openweather_api_key=env.get("OPENWEATHER_API_KEY") or None,
            opencage_api_key=env.get("OPENCAGE_API_KEY") or None,
            cache_ttl_s=_env_number(env, "TRIPWX_CACHE_TTL", DEFAULT_CACHE_TTL_S, float),
            http_timeout_s=_env_number(env, "TRIPWX_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_S, float),
            max_workers=_env_number(env, "TRIPWX_MAX_WORKERS", DEFAULT_MAX_WORKERS, int),
        )
        if settings.max_workers < 1:
            raise ConfigurationError("TRIPWX_MAX_WORKERS must be at least 1", details=settings.max_workers)
        if not settings.opencage_api_key:
            logger.info("OPENCAGE_API_KEY not set, location names will be coordinates")
        return settings

    def require_openweather_key(self) -> str:
        """Return the OpenWeather key or raise ConfigurationError."""
        if not self.openweather_api_key:
            raise ConfigurationError(
                "Environment variable OPENWEATHER_API_KEY is not defined",
                details="OPENWEATHER_API_KEY",
            )
        return self.openweather_api_key

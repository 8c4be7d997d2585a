"""Configuration for the hotel booking proxy API."""

import os
from dataclasses import dataclass

# Server
PORT = 5000
HOST = "0.0.0.0"

# Where the service-layer client reaches the proxy routes
API_BASE_URL = os.environ.get("API_BASE_URL", f"http://localhost:{PORT}")

# Upstream supplier (values come from the environment only)
UPSTREAM_BASE_URL_ENV = "UPSTREAM_BASE_URL"
UPSTREAM_API_KEY_ENV = "UPSTREAM_API_KEY"
UPSTREAM_TIMEOUT_ENV = "UPSTREAM_TIMEOUT_SECONDS"
UPSTREAM_TIMEOUT = 30.0  # seconds

# Outbound headers
API_KEY_HEADER = "x-xeni-token"
SESSION_ID_HEADER = "x-session-id"
CORRELATION_ID_HEADER = "corelationId"

# Pagination defaults for hotel search
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50

# Autosuggest
MIN_SUGGESTION_LENGTH = 2

# Cache TTLs (seconds)
CACHE_TTL_SUGGESTIONS = 10 * 60        # 10 minutes
CACHE_TTL_HOTEL_DETAILS = 24 * 60 * 60  # 24 hours

# Cache max sizes
CACHE_MAX_SUGGESTIONS = 500
CACHE_MAX_HOTEL_DETAILS = 500

# Geo
EARTH_RADIUS_KM = 6371.0

# Featured destinations: searched 95 days out for a single night
FEATURED_DAYS_AHEAD = 95
FEATURED_NIGHTS = 1
FEATURED_DESTINATIONS = [
    {"lat": 21.16, "lng": -86.85, "displayName": "Cancun"},
    {"lat": 28.54, "lng": -81.38, "displayName": "Orlando"},
    {"lat": 36.17, "lng": -115.14, "displayName": "Las Vegas"},
    {"lat": 18.56, "lng": -68.37, "displayName": "Caribbean"},  # Punta Cana
]


class ConfigError(RuntimeError):
    """Required configuration is missing or malformed."""


@dataclass(frozen=True)
class UpstreamSettings:
    base_url: str
    api_key: str
    timeout: float = UPSTREAM_TIMEOUT


def load_upstream_settings(environ=None) -> UpstreamSettings:
    """Read the supplier base URL and API key from the environment.

    Raises ConfigError listing every missing variable. There are no fallbacks.
    """
    env = os.environ if environ is None else environ
    base_url = (env.get(UPSTREAM_BASE_URL_ENV) or "").strip()
    api_key = (env.get(UPSTREAM_API_KEY_ENV) or "").strip()

    missing = [
        name
        for name, value in ((UPSTREAM_BASE_URL_ENV, base_url), (UPSTREAM_API_KEY_ENV, api_key))
        if not value
    ]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    raw_timeout = env.get(UPSTREAM_TIMEOUT_ENV)
    try:
        timeout = float(raw_timeout) if raw_timeout else UPSTREAM_TIMEOUT
    except ValueError:
        raise ConfigError(f"{UPSTREAM_TIMEOUT_ENV} must be a number, got {raw_timeout!r}")
    if timeout <= 0:
        raise ConfigError(f"{UPSTREAM_TIMEOUT_ENV} must be positive, got {timeout}")

    return UpstreamSettings(base_url=base_url.rstrip("/"), api_key=api_key, timeout=timeout)

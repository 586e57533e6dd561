"""
Current temperature lookup via the Open-Meteo APIs.

The engine decides when to fetch; this module only performs one blocking
lookup and is run off the input loop by the UI.
"""

from dataclasses import dataclass
from typing import Optional

import requests

from .logs import get_logger
from .recovery import EnrichmentError

log = get_logger("weather")

GEOCODE_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
UNKNOWN_TEMP = "--°"


@dataclass(frozen=True)
class WeatherRequest:
    city: str
    lat: float
    lon: float
    unit: str = "f"

    @property
    def celsius(self) -> bool:
        return self.unit in ("c", "celsius")


@dataclass(frozen=True)
class WeatherResult:
    temp: str = ""
    lat: float = 0.0
    lon: float = 0.0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _get_json(session, url: str, params: dict, timeout: float) -> dict:
    try:
        response = session.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        raise EnrichmentError(f"request to {url} failed: {e}") from e
    except ValueError as e:
        raise EnrichmentError(f"invalid JSON from {url}: {e}") from e


def geocode(session, city: str, timeout: float) -> tuple:
    data = _get_json(session, GEOCODE_URL, {
        'name': city.strip(),
        'count': 1,
        'language': 'en',
        'format': 'json',
    }, timeout)
    results = data.get('results') or []
    if not results:
        raise EnrichmentError(f"no geocoding results for {city!r}")
    try:
        return float(results[0]['latitude']), float(results[0]['longitude'])
    except (KeyError, TypeError, ValueError) as e:
        raise EnrichmentError(f"malformed geocoding result: {e}") from e


def fetch_weather(request: WeatherRequest, timeout: float = 5.0, session=None) -> WeatherResult:
    """Resolve coordinates if needed and read the current temperature.

    Raises:
        EnrichmentError: on any network, HTTP or payload problem
    """
    session = session or requests.Session()
    lat, lon = request.lat, request.lon
    if request.city and (lat == 0 or lon == 0):
        lat, lon = geocode(session, request.city, timeout)
        log.debug(f"Geocoded {request.city!r} to {lat:.4f},{lon:.4f}")

    data = _get_json(session, FORECAST_URL, {
        'latitude': f"{lat:.4f}",
        'longitude': f"{lon:.4f}",
        'current': 'temperature_2m',
        'temperature_unit': 'celsius' if request.celsius else 'fahrenheit',
    }, timeout)
    try:
        temperature = float(data['current']['temperature_2m'])
    except (KeyError, TypeError, ValueError) as e:
        raise EnrichmentError(f"malformed forecast payload: {e}") from e

    suffix = "°C" if request.celsius else "°F"
    return WeatherResult(temp=f"{temperature:.0f}{suffix}", lat=lat, lon=lon)


def run_weather_request(request: WeatherRequest, timeout: float = 5.0) -> WeatherResult:
    """Fetch and fold any failure into the result, for delivery as an event."""
    try:
        return fetch_weather(request, timeout)
    except EnrichmentError as e:
        log.warning(f"Weather lookup failed: {e}")
        return WeatherResult(error=str(e))

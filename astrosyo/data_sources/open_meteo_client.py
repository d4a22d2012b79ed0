"""Helpers for fetching the hourly cloud/precipitation/wind forecast from Open-Meteo."""
from __future__ import annotations

from typing import Any, Dict

import requests

from astrosyo.domain import HourlySeries
from astrosyo.errors import ForecastUnavailable
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag='open_meteo_client')

try:
    import requests_cache
    from retry_requests import retry
    logger.info("Using requests_cache and retry_requests")
except ImportError:
    logger.warning("Failed to import requests_cache and retry_requests.  Proceeding without caching.")
    requests_cache = None
    retry = None

if requests_cache and retry:
    cache_session = requests_cache.CachedSession('.cache', expire_after=900)
    session = retry(cache_session, retries=5, backoff_factor=0.2)
else:
    session = requests.Session()

OPEN_METEO_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"

HOURLY_VARS = ("cloud_cover", "precipitation", "wind_speed_10m")

EXPECTED_WEATHER_UNITS = {
    "cloud_cover": "%",
    "precipitation": "mm",
    "wind_speed_10m": "km/h",
}

# Alternative spellings that should not trigger warnings.
ALLOWED_WEATHER_UNIT_SYNONYMS = {
    "cloud_cover": {"%", "percent"},
    "precipitation": {"mm"},
    "wind_speed_10m": {"km/h", "kmh"},
}


def _warn_on_unexpected_units(units: dict, *, context: str):
    """Log a warning if Open-Meteo returns units the scoring weights were not tuned for."""
    if not units:
        return
    for field, expected in EXPECTED_WEATHER_UNITS.items():
        actual = units.get(field)
        if actual and actual != expected:
            allowed = ALLOWED_WEATHER_UNIT_SYNONYMS.get(field, set())
            if actual not in allowed:
                logger.warning(
                    "Unexpected Open-Meteo unit",
                    extra={"context": context, "field": field, "unit": actual, "expected": expected, "allowed": sorted(allowed)},
                )


def parse_hourly_series(data: Dict[str, Any]) -> HourlySeries:
    """Turn an Open-Meteo forecast payload into an HourlySeries.

    The payload's `timezone` (resolved by the API when `timezone=auto`) is kept
    with the series; the wall-clock `time` strings are only meaningful in it.
    """
    try:
        hourly = data["hourly"]
        times = hourly["time"]
        cloud = hourly["cloud_cover"]
        precip = hourly["precipitation"]
        wind = hourly["wind_speed_10m"]
    except (KeyError, TypeError) as exc:
        raise ForecastUnavailable(f"Open-Meteo payload missing hourly field: {exc}") from exc

    hourly_units = data.get("hourly_units") or {}
    _warn_on_unexpected_units(hourly_units, context="weather_hourly")

    return HourlySeries(
        time=tuple(times),
        cloud_cover=tuple(cloud),
        precipitation=tuple(precip),
        wind_speed=tuple(wind),
        timezone=data.get("timezone"),
        units={k: str(v) for k, v in hourly_units.items() if k in HOURLY_VARS},
    )


def fetch_hourly_series(
    latitude: float,
    longitude: float,
    *,
    timezone: str = "auto",
    forecast_hours: int = 24,
    wind_speed_unit: str = "kmh",
    precipitation_unit: str = "mm",
) -> HourlySeries:
    """Fetch the next `forecast_hours` hours (starting at the current hour)."""
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": ",".join(HOURLY_VARS),
        "forecast_hours": forecast_hours,
        "timezone": timezone,
        "wind_speed_unit": wind_speed_unit,
        "precipitation_unit": precipitation_unit,
    }

    logger.info(
        "Fetching hourly forecast",
        extra={"latitude": latitude, "longitude": longitude, "forecast_hours": forecast_hours},
    )
    try:
        resp = session.get(OPEN_METEO_WEATHER_URL, params=params, timeout=10)
        resp.raise_for_status()
        data = resp.json()
    except (requests.exceptions.RequestException, ValueError) as exc:
        logger.warning("Open-Meteo request failed", extra={"error": str(exc)})
        raise ForecastUnavailable("Weather API request failed") from exc

    series = parse_hourly_series(data)
    logger.debug("Fetched hourly forecast", extra={"hours": len(series), "timezone": series.timezone})
    return series

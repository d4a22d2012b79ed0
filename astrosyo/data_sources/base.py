"""Interfaces and helpers for forecast data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from astrosyo.domain import HourlySeries


class ForecastDataSource(Protocol):
    """Interface for anything that can provide an hourly observing forecast."""

    def fetch_hourly_series(
        self,
        latitude: float,
        longitude: float,
        *,
        timezone: str = "auto",
        forecast_hours: int = 24,
    ) -> HourlySeries:
        """Return hourly cloud/precipitation/wind starting at the current hour."""
        ...


@dataclass
class CallableForecastDataSource(ForecastDataSource):
    """Wrap a fetch callable so it can be swapped for a different backend."""

    hourly_series: Callable[..., HourlySeries]

    def fetch_hourly_series(self, *args, **kwargs) -> HourlySeries:
        """Delegate to the configured hourly-forecast callable."""
        return self.hourly_series(*args, **kwargs)

"""Pick the best contiguous observing window from an hourly forecast.

Each candidate window gets a badness score (lower is better):

    avg(cloud_cover) * 1.0 + sum(precipitation) * 100.0 + avg(wind_speed) * 0.2

Precipitation dominates so that even a little rain vetoes an otherwise clear
window; wind only separates windows that are otherwise alike. Exact ties go to
the earliest start.
"""

from __future__ import annotations

from astrosyo.domain import DEFAULT_POLICY, HourlySeries, ObservingPolicy, ObservingWindow
from astrosyo.errors import InputContractViolation
from astrosyo.numeric import round1, round_half_up


def window_score(
    series: HourlySeries,
    start: int,
    window_hours: int,
    policy: ObservingPolicy = DEFAULT_POLICY,
) -> float:
    """Badness score of the slice [start, start + window_hours)."""
    end = start + window_hours
    if start < 0 or window_hours < 1 or end > len(series):
        raise InputContractViolation(
            f"Window [{start}, {end}) does not fit a series of {len(series)} hours"
        )
    clouds = series.cloud_cover[start:end]
    precip = series.precipitation[start:end]
    wind = series.wind_speed[start:end]
    return (
        sum(clouds) / window_hours * policy.cloud_weight
        + sum(precip) * policy.precip_weight
        + sum(wind) / window_hours * policy.wind_weight
    )


def best_window(
    series: HourlySeries,
    horizon_hours: int | None = None,
    window_hours: int | None = None,
    policy: ObservingPolicy = DEFAULT_POLICY,
) -> ObservingWindow | None:
    """
    Return the lowest-scoring window within the first `horizon_hours` entries.

    Returns None when fewer than `window_hours` entries are available.
    """
    horizon_hours = policy.horizon_hours if horizon_hours is None else horizon_hours
    window_hours = policy.window_hours if window_hours is None else window_hours
    if horizon_hours < 1:
        raise InputContractViolation(f"horizon_hours must be >= 1, got {horizon_hours}")
    if window_hours < 1:
        raise InputContractViolation(f"window_hours must be >= 1, got {window_hours}")

    usable = min(horizon_hours, len(series))
    if usable < window_hours:
        return None

    best_start = 0
    best_score = window_score(series, 0, window_hours, policy)
    for start in range(1, usable - window_hours + 1):
        score = window_score(series, start, window_hours, policy)
        # strict comparison keeps the earliest start on ties
        if score < best_score:
            best_start, best_score = start, score

    end = best_start + window_hours
    clouds = series.cloud_cover[best_start:end]
    precip = series.precipitation[best_start:end]
    wind = series.wind_speed[best_start:end]
    return ObservingWindow(
        start=series.time[best_start],
        end=series.time[end - 1],
        window_hours=window_hours,
        avg_cloud_cover_percent=int(round_half_up(sum(clouds) / window_hours)),
        total_precip_mm=round1(sum(precip)),
        avg_wind_kmh=round1(sum(wind) / window_hours),
        score=round1(best_score),
    )

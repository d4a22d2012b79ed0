"""Reduce the first few forecast hours to a bad / mixed / ok verdict."""

from __future__ import annotations

from astrosyo.domain import DEFAULT_POLICY, HourlySeries, NightVerdict, ObservingPolicy, Verdict
from astrosyo.numeric import round1, round_half_up


def classify(avg_cloud: float, total_precip: float, policy: ObservingPolicy = DEFAULT_POLICY) -> Verdict:
    """Apply the fixed thresholds (strictly greater-than) to the aggregates."""
    if avg_cloud > policy.bad_cloud_percent or total_precip > policy.bad_precip_mm:
        return Verdict.BAD
    if avg_cloud > policy.mixed_cloud_percent:
        return Verdict.MIXED
    return Verdict.OK


def summarize_night(series: HourlySeries, policy: ObservingPolicy = DEFAULT_POLICY) -> NightVerdict:
    """Verdict over the first `policy.summary_hours` (6) entries of the series."""
    clouds = series.cloud_cover[: policy.summary_hours]
    precip = series.precipitation[: policy.summary_hours]

    avg_cloud = sum(clouds) / len(clouds)
    total_precip = sum(precip)

    return NightVerdict(
        verdict=classify(avg_cloud, total_precip, policy),
        avg_cloud_cover_percent=int(round_half_up(avg_cloud)),
        total_precip_mm=round1(total_precip),
    )

import pytest

from astrosyo.domain import HourlySeries, Verdict
from astrosyo.night_summary import classify, summarize_night


def _series(clouds, precip=None):
    n = len(clouds)
    return HourlySeries(
        time=tuple(f"2024-01-01T{h:02d}:00" for h in range(n)),
        cloud_cover=tuple(clouds),
        precipitation=tuple(precip if precip is not None else [0.0] * n),
        wind_speed=tuple([0.0] * n),
        timezone="UTC",
    )


def test_overcast_night_is_bad():
    summary = summarize_night(_series([90.0] * 6))
    assert summary.verdict is Verdict.BAD
    assert summary.avg_cloud_cover_percent == 90
    assert summary.total_precip_mm == 0.0


@pytest.mark.parametrize(
    "cloud,precip,expected",
    [
        (80.0, 0.0, Verdict.MIXED),
        (80.01, 0.0, Verdict.BAD),
        (50.0, 0.0, Verdict.OK),
        (50.01, 0.0, Verdict.MIXED),
        (0.0, 1.0, Verdict.OK),
        (0.0, 1.01, Verdict.BAD),
    ],
)
def test_thresholds_are_strict(cloud, precip, expected):
    assert classify(cloud, precip) is expected


def test_only_first_six_hours_count():
    summary = summarize_night(_series([0.0] * 6 + [100.0] * 6, [0.0] * 6 + [5.0] * 6))
    assert summary.verdict is Verdict.OK
    assert summary.avg_cloud_cover_percent == 0
    assert summary.total_precip_mm == 0.0


def test_short_series_uses_what_is_there():
    summary = summarize_night(_series([10.0, 20.0]))
    assert summary.avg_cloud_cover_percent == 15
    assert summary.verdict is Verdict.OK


def test_average_rounds_half_up():
    summary = summarize_night(_series([82.0, 83.0] * 3))
    assert summary.avg_cloud_cover_percent == 83
    assert summary.verdict is Verdict.BAD


def test_precipitation_total_rounded_to_one_decimal():
    summary = summarize_night(_series([10.0] * 6, [0.04, 0.04, 0.04, 0.0, 0.0, 0.0]))
    assert summary.total_precip_mm == 0.1

import unittest

from astrosyo.data_sources.base import CallableForecastDataSource
from astrosyo.data_sources.factory import DEFAULT_SOURCE_NAME, build_data_source
from astrosyo.domain import HourlySeries


class DummySettings:
    def __init__(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)
        self.forecast_source = getattr(self, "forecast_source", DEFAULT_SOURCE_NAME)


class TestDataSourceFactory(unittest.TestCase):
    def test_build_open_meteo_default(self):
        ds = build_data_source(DummySettings(forecast_source="open_meteo"))
        self.assertIsInstance(ds, CallableForecastDataSource)

    def test_empty_source_falls_back_to_default(self):
        ds = build_data_source(DummySettings(forecast_source=None))
        self.assertIsInstance(ds, CallableForecastDataSource)

    def test_unknown_source_raises(self):
        with self.assertRaises(ValueError):
            build_data_source(DummySettings(forecast_source="unknown-source"))

    def test_callable_source_delegates(self):
        series = HourlySeries(
            time=("2024-01-01T21:00",),
            cloud_cover=(10.0,),
            precipitation=(0.0,),
            wind_speed=(3.0,),
            timezone="UTC",
        )
        seen = {}

        def fetch(lat, lon, **kwargs):
            seen.update(lat=lat, lon=lon, **kwargs)
            return series

        ds = CallableForecastDataSource(hourly_series=fetch)
        self.assertIs(ds.fetch_hourly_series(1.0, 2.0, forecast_hours=5), series)
        self.assertEqual(seen, {"lat": 1.0, "lon": 2.0, "forecast_hours": 5})


if __name__ == "__main__":
    unittest.main()

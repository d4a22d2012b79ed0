import datetime as dt
import unittest

from fastapi.testclient import TestClient

from astrosyo.data_sources.base import CallableForecastDataSource
from astrosyo.domain import HourlySeries
from astrosyo.errors import ForecastUnavailable
from astrosyo.main import app as fastapi_app


def _mock_series(n=24, tz="Europe/Istanbul"):
    start = dt.datetime(2024, 1, 15, 21)
    clouds = [80.0] * n
    clouds[3] = clouds[4] = 5.0
    return HourlySeries(
        time=tuple((start + dt.timedelta(hours=i)).strftime("%Y-%m-%dT%H:%M") for i in range(n)),
        cloud_cover=tuple(clouds),
        precipitation=tuple([0.0] * n),
        wind_speed=tuple([6.0] * n),
        timezone=tz,
        units={"cloud_cover": "%", "precipitation": "mm", "wind_speed_10m": "km/h"},
    )


def _source(fn):
    return CallableForecastDataSource(hourly_series=fn)


class FakeNarrator:
    def narrate(self, tonight, equipment, best_window=None):
        return "- Enjoy the Pleiades"


class TestApi(unittest.TestCase):
    def setUp(self):
        import astrosyo.api as api_mod
        from astrosyo.config import settings

        self.api_mod = api_mod
        self.client = TestClient(fastapi_app)
        self._orig_source = api_mod.DATA_SOURCE
        self._orig_narrator = api_mod.NARRATOR
        self._orig_api_key = settings.api_key
        api_mod.DATA_SOURCE = _source(lambda *a, **k: _mock_series())
        api_mod.NARRATOR = None

    def tearDown(self):
        from astrosyo.config import settings

        self.api_mod.DATA_SOURCE = self._orig_source
        self.api_mod.NARRATOR = self._orig_narrator
        settings.api_key = self._orig_api_key

    def test_health(self):
        resp = self.client.get("/v1/health")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertTrue(data["ok"])
        self.assertEqual(data["catalog_size"], 30)
        self.assertFalse(data["narration"])

    def test_observe_tonight_200(self):
        resp = self.client.post(
            "/v1/observe-tonight",
            json={"lat": 41.0, "lon": 29.0, "equipment": {"type": "Refractor", "aperture_mm": 80}},
        )
        self.assertEqual(resp.status_code, 200)
        data = resp.json()

        self.assertTrue(data["ok"])
        self.assertEqual(data["received"]["lat"], 41.0)
        self.assertEqual(data["tonight"]["verdict"], "mixed")
        self.assertEqual(data["best_window"]["start"], "2024-01-16T00:00")
        self.assertEqual(data["best_window"]["end"], "2024-01-16T01:00")
        self.assertEqual(data["observed_at"], "2024-01-15T21:00:00+00:00")
        self.assertLessEqual(len(data["targets"]), 8)
        self.assertTrue(all(t["altitude_deg"] >= 15.0 for t in data["targets"]))
        self.assertEqual(len(data["plan"]), 3)
        self.assertIsNone(data["ai_plan"])
        self.assertEqual(data["weather"]["timezone"], "Europe/Istanbul")
        self.assertEqual(len(data["weather"]["hourly"]["time"]), 12)
        self.assertEqual(data["weather"]["hourly_units"]["wind_speed_10m"], "km/h")

    def test_observe_tonight_passes_location_to_source(self):
        seen = {}

        def fetch(lat, lon, **kwargs):
            seen.update(lat=lat, lon=lon, **kwargs)
            return _mock_series()

        self.api_mod.DATA_SOURCE = _source(fetch)
        resp = self.client.post("/v1/observe-tonight", json={"lat": -33.9, "lon": 18.4})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(seen["lat"], -33.9)
        self.assertEqual(seen["timezone"], "auto")

    def test_observe_tonight_with_narrator(self):
        self.api_mod.NARRATOR = FakeNarrator()
        resp = self.client.post("/v1/observe-tonight", json={"lat": 41.0, "lon": 29.0})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["ai_plan"], "- Enjoy the Pleiades")

    def test_forecast_unavailable_502(self):
        def boom(*args, **kwargs):
            raise ForecastUnavailable("Weather API request failed")

        self.api_mod.DATA_SOURCE = _source(boom)
        resp = self.client.post("/v1/observe-tonight", json={"lat": 41.0, "lon": 29.0})
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json()["detail"], "Weather API request failed")

    def test_malformed_provider_data_502(self):
        def mismatched(*args, **kwargs):
            return HourlySeries(
                time=("2024-01-01T21:00", "2024-01-01T22:00"),
                cloud_cover=(10.0,),
                precipitation=(0.0, 0.0),
                wind_speed=(1.0, 1.0),
                timezone="UTC",
            )

        self.api_mod.DATA_SOURCE = _source(mismatched)
        resp = self.client.post("/v1/observe-tonight", json={"lat": 41.0, "lon": 29.0})
        self.assertEqual(resp.status_code, 502)

    def test_missing_zone_from_provider_502(self):
        self.api_mod.DATA_SOURCE = _source(lambda *a, **k: _mock_series(tz=None))
        resp = self.client.post("/v1/observe-tonight", json={"lat": 41.0, "lon": 29.0})
        self.assertEqual(resp.status_code, 502)

    def test_invalid_coordinates_422(self):
        resp = self.client.post("/v1/observe-tonight", json={"lat": 95.0, "lon": 29.0})
        self.assertEqual(resp.status_code, 422)
        resp = self.client.post("/v1/observe-tonight", json={"lon": 29.0})
        self.assertEqual(resp.status_code, 422)

    def test_requires_api_key_when_set(self):
        from astrosyo.config import settings

        settings.api_key = "sekret"

        missing = self.client.post("/v1/observe-tonight", json={"lat": 41.0, "lon": 29.0})
        self.assertEqual(missing.status_code, 401)

        wrong = self.client.get("/v1/health", headers={"X-API-Key": "nope"})
        self.assertEqual(wrong.status_code, 401)

        ok = self.client.post(
            "/v1/observe-tonight",
            json={"lat": 41.0, "lon": 29.0},
            headers={"X-API-Key": "sekret"},
        )
        self.assertEqual(ok.status_code, 200)


if __name__ == "__main__":
    unittest.main()

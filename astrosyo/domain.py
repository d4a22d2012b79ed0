"""Domain vocabulary and strict schemas for the observing engine.

This module defines the contract between the forecast source, the numeric
engine (window optimizer, horizon calculator, target scorer) and anything
that presents or narrates the result: enums, the scoring policy, and the
Pydantic models that flow through the system. No scoring logic lives here.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from astrosyo.errors import InputContractViolation


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling; instances are immutable."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class Verdict(str, Enum):
    """Coarse classification of near-term observing conditions."""
    BAD = "bad"
    MIXED = "mixed"
    OK = "ok"


class RefractionMode(str, Enum):
    """Atmospheric refraction correction applied to computed altitudes."""
    NORMAL = "normal"
    NONE = "none"


CloudPercent = Annotated[float, Field(ge=0.0, le=100.0, allow_inf_nan=False)]
NonNegative = Annotated[float, Field(ge=0.0, allow_inf_nan=False)]


class ObservingPolicy(_StrictBaseModel):
    """Every tunable constant of the engine, kept in one place.

    Window badness:  avg(cloud) * cloud_weight + sum(precip) * precip_weight
                     + avg(wind) * wind_weight   (lower is better).
    Night verdict:   bad if avg cloud > bad_cloud_percent or total precip >
                     bad_precip_mm, else mixed if avg cloud >
                     mixed_cloud_percent, else ok. Comparisons are strict.
    Target score:    altitude * altitude_weight
                     + (magnitude_reference - mag) * magnitude_weight
                     + clamp((aperture - aperture_reference_mm) / aperture_reference_mm, 0, aperture_bonus_cap)
                     + clamp(size / size_reference_arcmin, 0, size_bonus_cap)
                     + type bonuses (case-insensitive substring keys).
    """

    # window optimizer
    cloud_weight: float = 1.0
    precip_weight: float = 100.0
    wind_weight: float = 0.2
    horizon_hours: int = Field(default=12, ge=1)
    window_hours: int = Field(default=2, ge=1)

    # night summarizer
    summary_hours: int = Field(default=6, ge=1)
    bad_cloud_percent: float = 80.0
    bad_precip_mm: float = 1.0
    mixed_cloud_percent: float = 50.0

    # target scorer
    min_altitude_deg: float = 15.0
    altitude_weight: float = 2.0
    magnitude_reference: float = 10.0
    magnitude_weight: float = 3.0
    aperture_reference_mm: float = 80.0
    aperture_bonus_cap: float = 2.0
    size_reference_arcmin: float = 30.0
    size_bonus_cap: float = 2.0
    type_bonuses: Dict[str, float] = Field(
        default_factory=lambda: {
            "globular": 0.6,
            "open cluster": 0.4,
            "nebula": 0.7,
        }
    )
    max_results: int = Field(default=8, ge=0)

    # plan composer
    large_aperture_mm: float = 150.0


DEFAULT_POLICY = ObservingPolicy()


class HourlySeries(_StrictBaseModel):
    """Parallel hourly forecast sequences; index i is the same hour everywhere.

    `time` holds local wall-clock strings ("2024-01-01T21:00") in the zone
    named by `timezone`.
    """
    time: Tuple[str, ...]
    cloud_cover: Tuple[CloudPercent, ...]
    precipitation: Tuple[NonNegative, ...]
    wind_speed: Tuple[NonNegative, ...]
    timezone: str | None = None
    units: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_parallel(self) -> "HourlySeries":
        """Reject empty or length-mismatched sequences."""
        lengths = {
            "time": len(self.time),
            "cloud_cover": len(self.cloud_cover),
            "precipitation": len(self.precipitation),
            "wind_speed": len(self.wind_speed),
        }
        if len(set(lengths.values())) != 1:
            raise InputContractViolation(f"Hourly series lengths differ: {lengths}")
        if lengths["time"] == 0:
            raise InputContractViolation("Hourly series is empty")
        return self

    def __len__(self) -> int:
        return len(self.time)

    def head(self, hours: int) -> "HourlySeries":
        """Return a copy restricted to the first `hours` entries."""
        return HourlySeries(
            time=self.time[:hours],
            cloud_cover=self.cloud_cover[:hours],
            precipitation=self.precipitation[:hours],
            wind_speed=self.wind_speed[:hours],
            timezone=self.timezone,
            units=dict(self.units),
        )


class GeoPosition(_StrictBaseModel):
    """Observer position on the Earth, in degrees."""
    latitude: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)


class EquipmentDescriptor(_StrictBaseModel):
    """Caller's telescope; only used as a scoring and plan modifier."""
    aperture_mm: float | None = Field(default=None, gt=0.0)
    type: str | None = None


class CelestialObject(_StrictBaseModel):
    """Static catalog entry for a deep-sky object (J2000 coordinates)."""
    id: str
    alt_id: str | None = None
    common_name: str | None = None
    ra_deg: float = Field(ge=0.0, lt=360.0, allow_inf_nan=False)
    dec_deg: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    apparent_magnitude: float | None = None
    size_major_arcmin: float | None = Field(default=None, ge=0.0)
    object_type: str = ""


class ScoredTarget(CelestialObject):
    """Catalog object with its altitude and observability score at one instant."""
    altitude_deg: float
    score: float


class ObservingWindow(_StrictBaseModel):
    """Best contiguous block of hours; `end` is the start of its last hour."""
    start: str
    end: str
    window_hours: int = Field(ge=1)
    avg_cloud_cover_percent: int
    total_precip_mm: float
    avg_wind_kmh: float
    score: float


class NightVerdict(_StrictBaseModel):
    """Coarse summary of the first hours of the forecast."""
    verdict: Verdict
    avg_cloud_cover_percent: int
    total_precip_mm: float


class ObservingReport(_StrictBaseModel):
    """Everything the engine produces for one request."""
    tonight: NightVerdict
    best_window: ObservingWindow | None = None
    observed_at: str | None = None
    targets: List[ScoredTarget] = Field(default_factory=list)
    plan: List[str] = Field(default_factory=list)
    ai_plan: str | None = None
    ai_plan_error: str | None = None

"""Rank catalog objects by how rewarding they are to observe at one instant."""

from __future__ import annotations

import datetime as dt
import math
from typing import Iterable

from astrosyo.domain import (
    DEFAULT_POLICY,
    CelestialObject,
    GeoPosition,
    ObservingPolicy,
    RefractionMode,
    ScoredTarget,
)
from astrosyo.errors import InputContractViolation
from astrosyo.horizon import altitude
from astrosyo.numeric import clamp, is_finite_number, round1


def type_bonus(object_type: str | None, policy: ObservingPolicy = DEFAULT_POLICY) -> float:
    """Sum of the bonuses whose key appears (case-insensitively) in the type."""
    t = (object_type or "").lower()
    return sum(bonus for key, bonus in policy.type_bonuses.items() if key in t)


def score_target(
    obj: CelestialObject,
    altitude_deg: float,
    aperture_mm: float | None,
    policy: ObservingPolicy = DEFAULT_POLICY,
) -> float:
    """Composite observability score; missing optional inputs drop their term."""
    score = altitude_deg * policy.altitude_weight
    if is_finite_number(obj.apparent_magnitude):
        score += (policy.magnitude_reference - obj.apparent_magnitude) * policy.magnitude_weight
    if is_finite_number(aperture_mm):
        ref = policy.aperture_reference_mm
        score += clamp((aperture_mm - ref) / ref, 0.0, policy.aperture_bonus_cap)
    if is_finite_number(obj.size_major_arcmin):
        score += clamp(obj.size_major_arcmin / policy.size_reference_arcmin, 0.0, policy.size_bonus_cap)
    return score + type_bonus(obj.object_type, policy)


def rank_targets(
    position: GeoPosition,
    instant: dt.datetime,
    aperture_mm: float | None,
    catalog: Iterable[CelestialObject],
    max_results: int | None = None,
    *,
    refraction: RefractionMode | str = RefractionMode.NORMAL,
    policy: ObservingPolicy = DEFAULT_POLICY,
) -> list[ScoredTarget]:
    """
    Score every catalog object above the altitude floor and return the best.

    Ordering is by descending score; objects with equal scores keep their
    catalog order (sorted() is stable). Altitude and score are rounded to one
    decimal in the output only.
    """
    max_results = policy.max_results if max_results is None else max_results
    if max_results < 0:
        raise InputContractViolation(f"max_results must be >= 0, got {max_results}")

    scored: list[tuple[float, float, CelestialObject]] = []
    for obj in catalog:
        if not (is_finite_number(obj.ra_deg) and is_finite_number(obj.dec_deg)):
            continue
        alt = altitude(position, instant, obj.ra_deg, obj.dec_deg, refraction)
        if not math.isfinite(alt) or alt < policy.min_altitude_deg:
            continue
        scored.append((score_target(obj, alt, aperture_mm, policy), alt, obj))

    ranked = sorted(scored, key=lambda item: -item[0])[:max_results]
    return [
        ScoredTarget(
            **obj.model_dump(),
            altitude_deg=round1(alt),
            score=round1(score),
        )
        for score, alt, obj in ranked
    ]

"""
Assemble tonight's observing report from the deterministic components, and
optionally ask an injected narrator for a free-text plan on top.
"""

from __future__ import annotations

from typing import Iterable

from astrosyo.domain import (
    DEFAULT_POLICY,
    CelestialObject,
    EquipmentDescriptor,
    GeoPosition,
    HourlySeries,
    NightVerdict,
    ObservingPolicy,
    ObservingReport,
    ObservingWindow,
    RefractionMode,
)
from astrosyo.horizon import resolve_instant
from astrosyo.narration import PlanNarrator
from astrosyo.night_summary import summarize_night
from astrosyo.plan import compose_plan
from astrosyo.target_scorer import rank_targets
from astrosyo.window_optimizer import best_window
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="planner")


def _narrate(
    narrator: PlanNarrator | None,
    tonight: NightVerdict,
    equipment: EquipmentDescriptor | None,
    window: ObservingWindow | None,
) -> tuple[str | None, str | None]:
    """Return (ai_plan, ai_plan_error); narrator failures never break the report."""
    if narrator is None:
        return None, None
    try:
        return narrator.narrate(tonight, equipment, window), None
    except Exception as e:
        logger.warning("Plan narration failed; returning rule-based plan only", extra={"error": str(e)})
        return None, str(e) or type(e).__name__


def build_observing_report(
    series: HourlySeries,
    position: GeoPosition,
    equipment: EquipmentDescriptor | None,
    catalog: Iterable[CelestialObject],
    *,
    narrator: PlanNarrator | None = None,
    horizon_hours: int | None = None,
    window_hours: int | None = None,
    max_results: int | None = None,
    refraction: RefractionMode | str = RefractionMode.NORMAL,
    policy: ObservingPolicy = DEFAULT_POLICY,
) -> ObservingReport:
    """Compute verdict, best window, ranked targets and plan for one request.

    Targets are ranked at the start of the best window, interpreted in the
    series' own time zone; without a window there is no instant to rank at
    and the target list is empty.
    """
    tonight = summarize_night(series, policy)
    window = best_window(series, horizon_hours, window_hours, policy)

    targets = []
    observed_at = None
    if window is not None:
        instant = resolve_instant(window.start, series.timezone)
        observed_at = instant.isoformat()
        aperture = equipment.aperture_mm if equipment else None
        targets = rank_targets(
            position,
            instant,
            aperture,
            catalog,
            max_results,
            refraction=refraction,
            policy=policy,
        )
    logger.debug(
        "Computed deterministic report",
        extra={
            "verdict": tonight.verdict.value,
            "window_start": window.start if window else None,
            "targets": len(targets),
        },
    )

    plan = compose_plan(tonight.verdict, equipment, policy)
    ai_plan, ai_plan_error = _narrate(narrator, tonight, equipment, window)

    return ObservingReport(
        tonight=tonight,
        best_window=window,
        observed_at=observed_at,
        targets=targets,
        plan=plan,
        ai_plan=ai_plan,
        ai_plan_error=ai_plan_error,
    )

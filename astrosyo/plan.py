"""Fixed-text observing plan keyed by the night verdict and aperture."""

from __future__ import annotations

from astrosyo.domain import DEFAULT_POLICY, EquipmentDescriptor, ObservingPolicy, Verdict
from astrosyo.numeric import is_finite_number

BAD_PLAN = (
    "Clouds/precip look bad. Expect limited observing.",
    "If there are brief gaps: try the Moon (if up) or bright planets.",
    "If clouds persist: use the night for planning, check tomorrow's forecast and prep your gear.",
)

MIXED_PLAN = (
    "Conditions are mixed. Watch for clear windows.",
    "Focus on bright targets: planets, Moon, bright star clusters (Pleiades, Beehive if visible).",
    "Keep sessions short and flexible, observe whenever the sky opens.",
)

OK_PLAN = (
    "Conditions look decent. Plan a full session.",
    "Start with bright/easy targets, then go deeper later in the night.",
)
LARGE_APERTURE_TIP = (
    "With ~150mm+ aperture, you can also try brighter nebulae/galaxies "
    "(e.g., Orion Nebula, Andromeda if visible)."
)
SMALL_APERTURE_TIP = "With smaller aperture/binoculars, prioritize open clusters and bright nebulae."


def compose_plan(
    verdict: Verdict | str,
    equipment: EquipmentDescriptor | None = None,
    policy: ObservingPolicy = DEFAULT_POLICY,
) -> list[str]:
    """Return up to three plan lines for the verdict."""
    verdict = Verdict(verdict)
    if verdict is Verdict.BAD:
        return list(BAD_PLAN)
    if verdict is Verdict.MIXED:
        return list(MIXED_PLAN)

    aperture = equipment.aperture_mm if equipment else None
    if is_finite_number(aperture) and aperture >= policy.large_aperture_mm:
        return [*OK_PLAN, LARGE_APERTURE_TIP]
    return [*OK_PLAN, SMALL_APERTURE_TIP]

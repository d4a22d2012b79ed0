"""Optional free-text observing plan from an LLM, layered on the deterministic report."""

from __future__ import annotations

from typing import Protocol

from astrosyo.domain import EquipmentDescriptor, NightVerdict, ObservingWindow
from astrosyo.ollama_client import OllamaClient
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="narration")


SYSTEM_PROMPT_PLAN = (
    "You are an astronomy observing assistant. Be honest and practical. "
    "Conditions and the best window are precomputed; never recompute or contradict them. "
    "Keep the answer short (max 5 bullet points)."
)


class PlanNarrator(Protocol):
    """Anything that can turn a night verdict into a short free-text plan.

    Implementations raise on failure; callers decide how to degrade.
    """

    def narrate(
        self,
        tonight: NightVerdict,
        equipment: EquipmentDescriptor | None,
        best_window: ObservingWindow | None = None,
    ) -> str:
        ...


def _strip_markdown_fences(text: str) -> str:
    """Remove surrounding Markdown code fences from text."""
    if not text:
        return text
    t = text.strip()
    if not t.startswith("```"):
        return t
    lines = t.splitlines()
    if lines and lines[0].strip().startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()


def build_plan_messages(
    tonight: NightVerdict,
    equipment: EquipmentDescriptor | None,
    best_window: ObservingWindow | None = None,
) -> list[dict]:
    """Prepare system+user chat messages describing tonight's conditions."""
    aperture = equipment.aperture_mm if equipment and equipment.aperture_mm else "unknown"
    lines = [
        f"Conditions verdict: {tonight.verdict.value}.",
        f"Average cloud cover: {tonight.avg_cloud_cover_percent}%.",
        f"Total precipitation: {tonight.total_precip_mm} mm.",
        f"Telescope aperture: {aperture} mm.",
    ]
    if equipment and equipment.type:
        lines.append(f"Telescope type: {equipment.type}.")
    if best_window:
        lines.append(
            f"Best window: {best_window.start} to {best_window.end} "
            f"(avg cloud {best_window.avg_cloud_cover_percent}%, score {best_window.score})."
        )
    lines.append("")
    lines.append("User asks: What can I observe tonight?")
    return [
        {"role": "system", "content": SYSTEM_PROMPT_PLAN},
        {"role": "user", "content": "\n".join(lines)},
    ]


def validate_narration_output(raw_text: str, max_bullets: int = 5) -> str:
    """
    Clean up an LLM reply before it is shown to the user.

    Markdown fences the model added despite instructions are stripped, and a
    bullet list longer than `max_bullets` is cut. Empty replies raise
    ValueError so the caller can report the narration as failed.
    """
    text = _strip_markdown_fences(raw_text or "").strip()
    if not text:
        raise ValueError("Empty narration")

    kept: list[str] = []
    bullets = 0
    for line in text.splitlines():
        if line.lstrip().startswith(("-", "*", "•")):
            bullets += 1
            if bullets > max_bullets:
                continue
        kept.append(line)
    return "\n".join(kept).strip()


class OllamaPlanNarrator:
    """PlanNarrator backed by the local Ollama chat API."""

    def __init__(self, client: OllamaClient | None = None):
        """Use the given client, or one built from settings."""
        self.client = client or OllamaClient()

    def narrate(
        self,
        tonight: NightVerdict,
        equipment: EquipmentDescriptor | None,
        best_window: ObservingWindow | None = None,
    ) -> str:
        """Ask the model for a short plan and return the cleaned reply."""
        messages = build_plan_messages(tonight, equipment, best_window)
        logger.debug(
            "LLM prompt lengths (chars): system=%d user=%d",
            len(messages[0]["content"]),
            len(messages[1]["content"]),
        )
        raw_reply = self.client.chat(messages)
        return validate_narration_output(raw_reply)

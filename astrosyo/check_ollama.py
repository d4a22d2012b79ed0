# astrosyo/check_ollama.py
"""Reachability probe and startup preflight for the plan-narration model."""

import os
import sys
from typing import Iterable, Optional, Dict, Any

import requests

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="check_ollama")

# ASTROSYO_AUTO_PULL_OLLAMA_MODELS=true|false
_AUTO_PULL_DEFAULT = os.getenv("ASTROSYO_AUTO_PULL_OLLAMA_MODELS", "false").lower() in (
    "1",
    "true",
    "yes",
)


def _base_url() -> str:
    """Return the configured Ollama base URL without a trailing slash."""
    from .config import settings

    return str(settings.ollama_base_url).rstrip("/")


def _tags_url() -> str:
    return f"{_base_url()}/api/tags"


def _pull_url() -> str:
    return f"{_base_url()}/api/pull"


def _installed_model_names(tags_json: dict) -> set[str]:
    """Model names from /api/tags, with and without their ":tag" suffix."""
    names: set[str] = set()
    for m in tags_json.get("models", []):
        name = m.get("name")
        if not name:
            continue
        names.add(name)
        names.add(name.split(":")[0])
    return names


def get_ollama_status(required_models: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """
    Non-fatal probe of Ollama, suitable for health checks.

    Returns {"ok", "reachable", "base_url", "installed_models",
    "required_models", "missing_models", "models_ok", "error"}.
    """
    required_models = list(required_models or [])
    status: Dict[str, Any] = {
        "ok": False,
        "reachable": False,
        "base_url": _base_url(),
        "installed_models": [],
        "required_models": required_models,
        "missing_models": [],
        "models_ok": False,
        "error": None,
    }

    try:
        resp = requests.get(_tags_url(), timeout=3)
        resp.raise_for_status()
        tags = resp.json()
    except Exception as e:
        status["error"] = str(e)
        return status

    status["reachable"] = True
    installed = _installed_model_names(tags)
    status["installed_models"] = sorted(installed)

    missing = [m for m in required_models if m not in installed]
    status["missing_models"] = missing
    status["models_ok"] = not missing
    status["ok"] = status["reachable"] and status["models_ok"]
    return status


def _pull_model(name: str) -> None:
    """Ask Ollama to pull a model via /api/pull; exit if it still is not there."""
    logger.info(f"Model '{name}' not found; requesting Ollama to pull it...")
    try:
        with requests.post(_pull_url(), json={"name": name}, stream=True, timeout=None) as resp:
            resp.raise_for_status()
            for line in resp.iter_lines():
                if line:
                    logger.info(f"   [ollama] {line.decode('utf-8', errors='replace')}")
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to pull Ollama model '{name}': {e}. Try: ollama pull {name}")
        sys.exit(1)

    if not get_ollama_status(required_models=[name]).get("models_ok"):
        logger.error(f"Model '{name}' still not visible after pull.")
        sys.exit(1)
    logger.info(f"Model '{name}' is now available.")


def check_ollama(
    required_models: Optional[Iterable[str]] = None,
    auto_pull: Optional[bool] = None,
) -> None:
    """
    "Hard" check for startup.

    Exits with status 1 if Ollama is unreachable, or if required models are
    missing and cannot be pulled.
    """
    if auto_pull is None:
        auto_pull = _AUTO_PULL_DEFAULT

    required_models = list(required_models or [])
    status = get_ollama_status(required_models=required_models)

    if not status["reachable"]:
        logger.error(f"Ollama does not appear to be running at {_tags_url()}: {status['error']}")
        logger.error("Start it with `ollama serve`, or set ASTROSYO_NARRATION_ENABLED=false.")
        sys.exit(1)

    missing = status["missing_models"]
    if not missing:
        logger.info(f"Ollama reachable at {_base_url()}; models ok: {', '.join(required_models) or '-'}")
        return

    if auto_pull:
        for name in missing:
            _pull_model(name)
        return

    for m in missing:
        logger.error(f"Required Ollama model not installed: {m} (ollama pull {m})")
    sys.exit(1)

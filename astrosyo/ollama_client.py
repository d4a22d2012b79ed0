"""Thin client for the local Ollama chat API used by plan narration."""

import time

import requests

from .config import Settings, settings as default_settings
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="ollama_client")


class OllamaClient:
    """
    Minimal client for POST /api/chat.

    Connection details, timeout and retry policy come from `Settings`
    (ASTROSYO_OLLAMA_*); keyword arguments override them per instance.
    Transport errors and Ollama's intermittent "EOF" replies are retried;
    any other failure raises.
    """

    def __init__(
        self,
        *,
        config: Settings | None = None,
        timeout_sec: float | None = None,
        max_retries: int | None = None,
        retry_backoff_sec: float | None = None,
    ):
        cfg = config or default_settings
        self.url = f"{str(cfg.ollama_base_url).rstrip('/')}/api/chat"
        self.model = cfg.ollama_model
        self.options = cfg.ollama_options
        self.timeout_sec = timeout_sec if timeout_sec is not None else cfg.ollama_timeout_sec
        self.max_retries = max_retries if max_retries is not None else cfg.ollama_retries
        self.retry_backoff_sec = retry_backoff_sec if retry_backoff_sec is not None else cfg.ollama_retry_backoff_sec

    def _payload(self, messages) -> dict:
        return {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": self.options,
        }

    def _post(self, payload: dict) -> requests.Response:
        """POST with retries; returns the first 200 response."""
        attempts = self.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                r = requests.post(self.url, json=payload, timeout=self.timeout_sec)
            except requests.exceptions.RequestException as exc:
                logger.warning("Ollama POST failed on attempt %d/%d: %s", attempt, attempts, exc)
                if attempt == attempts:
                    raise
                time.sleep(self.retry_backoff_sec)
                continue

            logger.info("Ollama POST took %.2fs (status %d)", r.elapsed.total_seconds(), r.status_code)
            if r.status_code == 200:
                return r

            error_text = (r.text or "")[:200]
            if "EOF" in error_text and attempt < attempts:
                logger.warning("Ollama returned EOF; retrying (attempt %d/%d)", attempt, attempts)
                time.sleep(self.retry_backoff_sec)
                continue
            raise RuntimeError(
                f"Ollama POST failed with status {r.status_code}: {error_text} "
                f"(model={self.model}, url={self.url})"
            )
        raise RuntimeError(f"Ollama POST gave no response after {attempts} attempts")

    def chat(self, messages) -> str:
        """Send a chat request and return the assistant's reply text."""
        payload = self._payload(messages)
        logger.debug("Ollama chat request: model=%s messages=%d", self.model, len(messages))
        r = self._post(payload)
        try:
            data = r.json()
        except ValueError as exc:
            raise RuntimeError(f"Ollama returned non-JSON response: {r.text[:200]}") from exc

        content = (data.get("message") or {}).get("content", "")
        if isinstance(content, (dict, list)):
            content = str(content)
        return content

"""Application configuration pulled from environment variables via pydantic."""
import os
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from astrosyo.domain import RefractionMode
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the observe-tonight service."""
    model_config = SettingsConfigDict(env_prefix="ASTROSYO_", extra="ignore")

    forecast_source: str = "open_meteo"  # options: open_meteo
    forecast_hours: int = Field(default=24, ge=1)
    horizon_hours: int = Field(default=12, ge=1)
    window_hours: int = Field(default=2, ge=1)
    max_targets: int = Field(default=8, ge=0)
    refraction: RefractionMode = RefractionMode.NORMAL
    catalog_path: str | None = None  # None -> bundled catalog
    api_key: str | None = None
    narration_enabled: bool = True
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "phi4-mini"
    ollama_timeout_sec: float = Field(default=60.0, gt=0)
    ollama_retries: int = Field(default=1, ge=0)
    ollama_retry_backoff_sec: float = Field(default=0.5, ge=0)
    ollama_options: dict = Field(
        default_factory=lambda: {
            "temperature": float(os.getenv("ASTROSYO_OLLAMA_TEMPERATURE", 0.7)),
            "num_predict": int(os.getenv("ASTROSYO_OLLAMA_NUM_PREDICT", 200)),
        }
    )

    @field_validator("ollama_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")

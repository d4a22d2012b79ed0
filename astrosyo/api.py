"""HTTP API for the observe-tonight assistant."""

import hmac
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from .catalog_store import CatalogStore
from .config import settings
from .data_sources import build_data_source
from .domain import (
    EquipmentDescriptor,
    GeoPosition,
    HourlySeries,
    NightVerdict,
    ObservingWindow,
    ScoredTarget,
)
from .errors import ForecastUnavailable, InputContractViolation
from .narration import OllamaPlanNarrator, PlanNarrator
from .planner import build_observing_report
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="api")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """Validate the X-API-Key header against the configured static key, if any."""
    if not settings.api_key:
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def build_catalog_store() -> CatalogStore:
    """Catalog configured via ASTROSYO_CATALOG_PATH, or the bundled one."""
    if settings.catalog_path:
        return CatalogStore.from_path(settings.catalog_path)
    return CatalogStore.bundled()


def build_narrator() -> Optional[PlanNarrator]:
    """LLM narrator when narration is enabled, else None."""
    if not settings.narration_enabled:
        logger.info("Plan narration disabled")
        return None
    return OllamaPlanNarrator()


router = APIRouter(dependencies=[Depends(require_api_key)])
DATA_SOURCE = build_data_source(settings)
CATALOG = build_catalog_store()
NARRATOR = build_narrator()


class ObserveTonightRequest(BaseModel):
    """Incoming observe-tonight payload."""
    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    lon: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)
    equipment: EquipmentDescriptor | None = None


class WeatherEcho(BaseModel):
    """The part of the forecast the recommendation was computed from."""
    timezone: str | None = None
    hourly_units: Dict[str, str] = Field(default_factory=dict)
    hourly: Dict[str, List] = Field(default_factory=dict)


class ObserveTonightResponse(BaseModel):
    """Full recommendation returned to the client."""
    ok: bool = True
    received: ObserveTonightRequest
    tonight: NightVerdict
    best_window: ObservingWindow | None = None
    observed_at: str | None = None
    targets: List[ScoredTarget] = Field(default_factory=list)
    plan: List[str] = Field(default_factory=list)
    ai_plan: str | None = None
    ai_plan_error: str | None = None
    weather: WeatherEcho


class HealthResponse(BaseModel):
    """Liveness payload."""
    ok: bool
    message: str
    catalog_size: int
    narration: bool


def _weather_echo(series: HourlySeries, hours: int) -> WeatherEcho:
    """Forecast slice shown alongside the recommendation."""
    head = series.head(hours)
    return WeatherEcho(
        timezone=head.timezone,
        hourly_units=dict(head.units),
        hourly={
            "time": list(head.time),
            "cloud_cover": list(head.cloud_cover),
            "precipitation": list(head.precipitation),
            "wind_speed_10m": list(head.wind_speed),
        },
    )


def _fetch_series(req: ObserveTonightRequest) -> HourlySeries:
    """Fetch the forecast, mapping provider trouble to 502."""
    try:
        return DATA_SOURCE.fetch_hourly_series(
            req.lat,
            req.lon,
            timezone="auto",
            forecast_hours=settings.forecast_hours,
        )
    except ForecastUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    except (InputContractViolation, ValidationError) as exc:
        logger.error("Forecast provider returned unusable data", extra={"error": str(exc)})
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Forecast data unusable")


@router.get("/health", response_model=HealthResponse)
def health():
    """Report liveness and catalog size."""
    return HealthResponse(
        ok=True,
        message="Backend is running",
        catalog_size=len(CATALOG),
        narration=NARRATOR is not None,
    )


@router.post("/observe-tonight", response_model=ObserveTonightResponse)
def observe_tonight(req: ObserveTonightRequest):
    """Recommend tonight's best window and targets for a location and telescope."""
    logger.info("Observe-tonight request", extra={"lat": req.lat, "lon": req.lon})
    series = _fetch_series(req)
    position = GeoPosition(latitude=req.lat, longitude=req.lon)

    try:
        report = build_observing_report(
            series,
            position,
            req.equipment,
            CATALOG,
            narrator=NARRATOR,
            horizon_hours=settings.horizon_hours,
            window_hours=settings.window_hours,
            max_results=settings.max_targets,
            refraction=settings.refraction,
        )
    except InputContractViolation as exc:
        logger.error("Forecast data violated the engine's input contract", extra={"error": str(exc)})
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Forecast data unusable: {exc}")

    return ObserveTonightResponse(
        received=req,
        weather=_weather_echo(series, settings.horizon_hours),
        **report.model_dump(),
    )

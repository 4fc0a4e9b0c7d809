# path: route-extract-api/route_extract/config.py

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple
import os


ORACLE_MODEL = "claude-sonnet-4-20250514"
ORACLE_MAX_TOKENS = 4096
ORACLE_TIMEOUT_S = 60.0

OSRM_BASE_URL = "https://router.project-osrm.org"
OSRM_PROFILE = "cycling"
OSRM_TIMEOUT_S = 15.0

# Base elevation of the reference region (Front Range, CO)
DEFAULT_ELEVATION_FT = 5300.0
# ~0.15 miles per step at the reference latitude
STEP_SPACING_DEG = 0.002
MIN_SEGMENT_STEPS = 5
MIN_SNAPPED_POINTS = 10
MAX_ROUTE_POINTS = 20_000

MIN_ANIMATION_POINTS = 100
MIN_RESAMPLE_TARGET = 150
RESAMPLE_FACTOR = 3


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    anthropic_api_key: Optional[str] = None
    oracle_model: str = ORACLE_MODEL
    oracle_max_tokens: int = ORACLE_MAX_TOKENS
    oracle_timeout_s: float = ORACLE_TIMEOUT_S

    osrm_base_url: str = OSRM_BASE_URL
    osrm_profile: str = OSRM_PROFILE
    osrm_timeout_s: float = OSRM_TIMEOUT_S
    snap_to_roads: bool = True

    default_elevation_ft: float = DEFAULT_ELEVATION_FT
    step_spacing_deg: float = STEP_SPACING_DEG
    min_segment_steps: int = MIN_SEGMENT_STEPS
    min_snapped_points: int = MIN_SNAPPED_POINTS
    max_route_points: int = MAX_ROUTE_POINTS

    min_animation_points: int = MIN_ANIMATION_POINTS
    min_resample_target: int = MIN_RESAMPLE_TARGET
    resample_factor: int = RESAMPLE_FACTOR

    cors_allow_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
        return cls(
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            oracle_model=os.getenv("ORACLE_MODEL", ORACLE_MODEL),
            oracle_max_tokens=_env_int("ORACLE_MAX_TOKENS", ORACLE_MAX_TOKENS),
            oracle_timeout_s=_env_float("ORACLE_TIMEOUT_S", ORACLE_TIMEOUT_S),
            osrm_base_url=os.getenv("OSRM_BASE_URL", OSRM_BASE_URL).rstrip("/"),
            osrm_profile=os.getenv("OSRM_PROFILE", OSRM_PROFILE),
            osrm_timeout_s=_env_float("OSRM_TIMEOUT_S", OSRM_TIMEOUT_S),
            snap_to_roads=_env_bool("ROUTE_SNAP_TO_ROADS", True),
            default_elevation_ft=_env_float("DEFAULT_ELEVATION_FT", DEFAULT_ELEVATION_FT),
            step_spacing_deg=_env_float("STEP_SPACING_DEG", STEP_SPACING_DEG),
            min_segment_steps=_env_int("MIN_SEGMENT_STEPS", MIN_SEGMENT_STEPS),
            min_snapped_points=_env_int("MIN_SNAPPED_POINTS", MIN_SNAPPED_POINTS),
            max_route_points=_env_int("MAX_ROUTE_POINTS", MAX_ROUTE_POINTS),
            min_animation_points=_env_int("MIN_ANIMATION_POINTS", MIN_ANIMATION_POINTS),
            min_resample_target=_env_int("MIN_RESAMPLE_TARGET", MIN_RESAMPLE_TARGET),
            resample_factor=_env_int("RESAMPLE_FACTOR", RESAMPLE_FACTOR),
            cors_allow_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_int("PORT", 8000),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()

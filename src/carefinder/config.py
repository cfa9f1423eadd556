"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="CAREFINDER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Practitioner Proximity API"
    api_prefix: str = "/api"
    practitioners_file: Path = Field(
        default=Path("data/practitioners.json"),
        description="Practitioner list used when the database is not configured.",
    )
    practitioners_table: str = Field(default="doctors", description="Supabase table holding practitioners.")

    geoapify_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Geoapify routing service. Without it every route is estimated.",
    )
    geoapify_base_url: str = Field(default="https://api.geoapify.com")
    routing_mode: str = Field(default="drive", description="Travel mode requested from the routing service.")
    routing_timeout_seconds: float = Field(default=10.0, gt=0.0)
    routing_max_retries: int = Field(default=0, ge=0)
    routing_backoff_seconds: float = Field(default=0.5, ge=0.0)
    fallback_seconds_per_km: float = Field(
        default=120.0,
        gt=0.0,
        description="Travel time assumed per straight-line kilometre for estimated routes (~30 km/h).",
    )

    location_timeout_seconds: float = Field(default=10.0, gt=0.0)
    location_max_age_seconds: float = Field(default=5.0, ge=0.0)
    location_fallback_timeout_seconds: float = Field(default=5.0, gt=0.0)
    location_fallback_max_age_seconds: float = Field(default=10.0, ge=0.0)
    low_accuracy_threshold_meters: float = Field(default=100.0, gt=0.0)
    poor_accuracy_threshold_meters: float = Field(default=200.0, gt=0.0)

    default_radius_km: float = Field(default=50.0, gt=0.0)
    min_radius_km: float = Field(default=5.0, gt=0.0)
    max_radius_km: float = Field(default=100.0, gt=0.0)
    max_experience_filter_years: int = Field(default=30, ge=0)
    default_map_center: tuple[float, ...] = Field(
        default=(20.5937, 78.9629),
        description="Map centre (lat, lng) used before any position or practitioner is known.",
    )
    external_maps_url: str = Field(default="https://www.google.com/maps/dir/")

    session_idle_seconds: float = Field(
        default=1800.0,
        gt=0.0,
        description="Map sessions unused for this long are discarded.",
    )
    max_sessions: int = Field(default=1000, gt=0, description="Upper bound on concurrently held map sessions.")

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("practitioners_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("default_map_center", mode="before")
    @classmethod
    def _parse_float_pair_from_env(cls, value: Any) -> tuple[float, ...]:
        """Parse a ``lat,lng`` pair from environment variable (comma-separated or JSON array)."""
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except (json.JSONDecodeError, TypeError):
                parsed = [item.strip() for item in value.split(",") if item.strip()]
            value = parsed
        if isinstance(value, (list, tuple)):
            pair = tuple(float(item) for item in value)
            if len(pair) != 2:
                raise ValueError("default_map_center expects exactly two values: lat,lng")
            return pair
        raise ValueError(f"Unsupported map centre value: {value!r}")


settings = Settings()

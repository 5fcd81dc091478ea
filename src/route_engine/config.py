"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTE_ENGINE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Delivery Route Engine API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level applied by create_app().")
    data_root: Path = Field(default=Path("data"), description="Root directory for persisted route results.")
    valhalla_base_url: str = Field(
        default="https://valhalla1.openstreetmap.de",
        description="Base URL for the Valhalla routing service (the /route endpoint is appended).",
    )
    max_waypoints: int = Field(default=10, description="Maximum locations sent in one routing request.")
    inter_call_delay_ms: int = Field(default=1000, description="Delay before each routing request.")
    timeout_ms: int = Field(default=30000, description="Per-request timeout for the routing service.")
    costing_profile: str = Field(default="auto", description="Valhalla costing model (auto, truck, bicycle...).")
    units: Literal["kilometers", "miles"] = "kilometers"
    language: str = "en"
    shape_match: str = "map_snap"
    polyline_precision: int = Field(default=6, description="Decimal precision of returned leg shapes.")
    service_area_bounds: tuple[float, ...] = Field(
        default=(24.7, 25.5, 54.8, 55.7),
        description="Expected delivery area as (lat_min, lat_max, lng_min, lng_max).",
    )
    install_minutes_per_stop: int = Field(default=60, ge=0)
    buffer_minutes_per_stop: int = Field(default=15, ge=0)
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", mode="before")
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

    @field_validator("service_area_bounds", mode="before")
    @classmethod
    def _parse_bounds_from_env(cls, value: Any) -> tuple[float, ...]:
        """Parse the four service-area bounds from a JSON array or comma-separated string."""
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except (json.JSONDecodeError, TypeError):
                parsed = [item.strip() for item in value.split(",") if item.strip()]
            value = parsed
        bounds = tuple(float(item) for item in value)
        if len(bounds) != 4:
            raise ValueError("service_area_bounds needs exactly four values: lat_min, lat_max, lng_min, lng_max.")
        return bounds


settings = Settings()

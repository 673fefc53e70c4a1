"""Application configuration and settings management."""

from typing import Any, Literal

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TOURPLAN_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Multi-Stop Tour Planner API"
    api_prefix: str = "/api"
    cost_model: Literal["geometric", "network"] = Field(
        default="network",
        description="Pairwise cost strategy used by the tour optimizer.",
    )
    osrm_base_url: str = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: str = Field(
        default="walking",
        description="OSRM profile to use when computing travel times.",
    )
    osrm_timeout_seconds: float = Field(default=10.0, gt=0.0)
    osrm_max_retries: int = Field(default=0, ge=0)
    osrm_backoff_seconds: float = Field(default=0.5, ge=0.0)
    assumed_speed_kmh: float = Field(
        default=4.5,
        gt=0.0,
        description="Travel speed used to turn great-circle distance into minutes.",
    )
    max_waypoints: int = Field(default=50, ge=1)
    solver_max_sweeps: int = Field(default=1000, ge=0)
    solver_sweeps_per_waypoint: int = Field(default=50, ge=0)
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

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

    @field_validator("osrm_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


settings = Settings()

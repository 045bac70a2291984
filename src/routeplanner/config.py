"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models.domain import TrafficModel


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTEPLANNER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Delivery Route Planner API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for saved routes.")
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="API key sent with every routing request.",
    )
    routing_provider: Literal["routes", "directions"] = Field(
        default="routes",
        description="Routing API generation: 'routes' (computeRoutes) or 'directions' (legacy JSON API).",
    )
    routes_api_url: str = "https://routes.googleapis.com/directions/v2:computeRoutes"
    directions_api_url: str = "https://maps.googleapis.com/maps/api/directions/json"
    region_code: str = Field(default="SE", description="Home-country region hint sent to the provider.")
    request_timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_waypoints_per_request: int = Field(
        default=25,
        ge=1,
        description="Provider ceiling on intermediate waypoints in a single request.",
    )
    waypoint_batch_size: Optional[int] = Field(
        default=None,
        ge=1,
        description="Waypoints per request once a route is segmented. Defaults to the ceiling.",
    )
    max_total_stops: int = Field(default=27, ge=2)
    departure_lead_seconds: int = Field(
        default=300,
        ge=1,
        description="How far into the future a past departure time is moved.",
    )
    default_traffic_model: TrafficModel = TrafficModel.BEST_GUESS
    max_saved_routes: int = Field(default=5, ge=1)
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
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

    @property
    def effective_batch_size(self) -> int:
        return min(self.waypoint_batch_size or self.max_waypoints_per_request, self.max_waypoints_per_request)


settings = Settings()

"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="COLLECTION_GEO_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Collection Geo API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level.")
    data_root: Path = Field(default=Path("data"), description="Root directory for local data files.")
    customer_file: Path = Field(
        default=Path("data/customers.csv"),
        description="Customer export used when Supabase is not configured.",
    )
    route_storage: Literal["memory", "file", "supabase"] = Field(
        default="file",
        description="Backend used to persist collection routes.",
    )
    routes_file_name: str = Field(default="routes.json", description="File name for routes under data_root.")

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    customers_table: str = "customers"
    locations_table: str = "customer_locations"
    routes_table: str = "collection_routes"

    # Placement and travel estimates
    default_region_latitude: float = Field(default=-8.0476, ge=-90.0, le=90.0)
    default_region_longitude: float = Field(default=-34.8770, ge=-180.0, le=180.0)
    default_city: str = "Recife"
    neighborhood_jitter_degrees: float = Field(
        default=0.005,
        ge=0.0,
        description="Max offset (each axis) applied around a known neighborhood centroid.",
    )
    fallback_jitter_degrees: float = Field(
        default=0.05,
        ge=0.0,
        description="Max offset (each axis) applied around the default region centroid.",
    )
    average_speed_kmh: float = Field(default=30.0, gt=0.0, description="Urban travel speed for leg estimates.")
    random_seed: Optional[int] = Field(default=None, description="Seed for coordinate jitter; unseeded when empty.")

    # Reverse geocoding (OpenStreetMap Nominatim)
    reverse_geocoder_url: Optional[str] = Field(
        default="https://nominatim.openstreetmap.org/reverse",
        description="Reverse geocoding endpoint. Leave empty to skip address lookup.",
    )
    reverse_geocoder_user_agent: str = "CollectionGeo/1.0"
    reverse_geocoder_timeout_seconds: float = Field(default=10.0, gt=0.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", "customer_file", mode="before")
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
    def routes_file(self) -> Path:
        return self.data_root / self.routes_file_name


settings = Settings()

"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings


class StoreConfig(BaseSettings):
    """Plot record store configuration."""

    model_config = {"env_prefix": "GRAVEMAP_STORE_"}

    provider: str = "memory"
    base_url: str = "http://localhost:3001"
    api_token: SecretStr | None = None
    timeout_seconds: int = 30
    max_retries: int = 1
    retry_backoff_seconds: float = 0.5
    fixtures_path: str = "config/plot_fixtures.yml"


class GeocoderConfig(BaseSettings):
    """Cemetery search (geocoding) configuration."""

    model_config = {"env_prefix": "GRAVEMAP_GEOCODER_"}

    provider: str = "mock"
    base_url: str = "https://nominatim.openstreetmap.org"
    user_agent: str = "gravemap/0.1 (cemetery plot map)"
    query_qualifier: str = "cemetery"
    timeout_seconds: int = 10
    fetch_boundary: bool = True
    boundary_half_width: float = 0.001


class MapConfig(BaseSettings):
    """Map viewport configuration."""

    model_config = {"env_prefix": "GRAVEMAP_MAP_"}

    min_marker_zoom: int = 14
    default_zoom: int = 15
    search_zoom: int = 17
    center_lat: float = -26.19394
    center_lng: float = 28.02739
    viewport_width: int = 1024
    viewport_height: int = 768
    tile_size: int = 256


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "GRAVEMAP_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    store: StoreConfig = Field(default_factory=StoreConfig)
    geocoder: GeocoderConfig = Field(default_factory=GeocoderConfig)
    map: MapConfig = Field(default_factory=MapConfig)

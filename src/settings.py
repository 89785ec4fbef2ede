"""Runtime settings for the location acquisition engine and HTTP surface.

Every field can be overridden with an environment variable named
``LOCATION_<FIELD_NAME>`` (e.g. ``LOCATION_MAX_RETRIES=5``). Values are
validated by pydantic, so a malformed override fails at startup instead of
in the middle of an acquisition.
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field

from src.models.request_models import Provider

ENV_PREFIX = "LOCATION_"


class LocationSettings(BaseModel):
    max_retries: int = Field(default=3, ge=1)
    timeout_ms: int = Field(default=15_000, gt=0)
    fallback_timeout_ms: int = Field(default=5_000, gt=0)
    maximum_age_ms: int = Field(default=300_000, ge=0)
    recent_max_age_ms: int = Field(default=1_800_000, gt=0)
    network_timeout_seconds: float = Field(default=5.0, gt=0)
    manual_input_timeout_seconds: float = Field(default=30.0, gt=0)
    ip_provider: Provider = Provider.ipapi_co
    cache_key: str = "lastKnownLocation"
    cache_path: Path = Path(".location_cache.json")


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, lt=65536)
    reload: bool = False


def load_settings() -> LocationSettings:
    """Build LocationSettings from ``LOCATION_*`` environment variables."""
    overrides = {
        name: os.environ[f"{ENV_PREFIX}{name.upper()}"]
        for name in LocationSettings.model_fields
        if f"{ENV_PREFIX}{name.upper()}" in os.environ
    }
    return LocationSettings(**overrides)


def load_server_settings() -> ServerSettings:
    """Build ServerSettings from ``APP_HOST``, ``APP_PORT`` and ``APP_RELOAD``."""
    overrides = {
        name: os.environ[f"APP_{name.upper()}"]
        for name in ServerSettings.model_fields
        if f"APP_{name.upper()}" in os.environ
    }
    return ServerSettings(**overrides)

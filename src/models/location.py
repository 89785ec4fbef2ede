from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.models.common import utc_now

SENSOR_ONLY_FIELDS = ("altitude", "altitude_accuracy", "heading", "speed")


class LocationSource(str, Enum):
    """Where a fix came from."""

    gps = "gps"
    ip_geolocation = "ip_geolocation"
    manual_input = "manual_input"
    user_consent = "user_consent"
    cached = "cached"


class FallbackType(str, Enum):
    """Fallback tier that produced a fix; drives the human-readable description."""

    cached = "cached"
    network = "network"
    manual = "manual"
    user_consent = "user_consent"


class DevicePosition(BaseModel):
    """A raw reading reported by the device positioning capability."""

    latitude: float
    longitude: float
    accuracy: float
    altitude: float | None = None
    altitude_accuracy: float | None = None
    heading: float | None = None
    speed: float | None = None


class LocationFix(BaseModel):
    """A single location measurement, genuine or fallback.

    Fixes are frozen: a new acquisition (or re-tagging by the fallback
    cascade) always produces a new instance.
    """

    model_config = ConfigDict(frozen=True)

    latitude: float | None = None
    longitude: float | None = None
    accuracy: float | None = None
    altitude: float | None = None
    altitude_accuracy: float | None = None
    heading: float | None = None
    speed: float | None = None
    timestamp: datetime = Field(default_factory=utc_now)
    source: LocationSource
    is_fallback: bool = False
    fallback_reason: str | None = None
    fallback_type: FallbackType | None = None
    note: str | None = None

    # Supplementary metadata attached by the network and manual tiers.
    city: str | None = None
    region: str | None = None
    country: str | None = None
    address: str | None = None

    @field_validator("timestamp")
    @classmethod
    def _require_aware_timestamp(cls, value: datetime) -> datetime:
        """Naive timestamps are read as UTC so staleness checks never mix naive and aware values."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_invariants(self) -> "LocationFix":
        if self.is_fallback and not (self.fallback_reason or "").strip():
            raise ValueError("fallback fixes must carry a non-empty fallback_reason")
        if (self.latitude is None or self.longitude is None) and self.source is not LocationSource.user_consent:
            raise ValueError("coordinates may only be missing when source is 'user_consent'")
        if self.source is not LocationSource.gps and any(
            getattr(self, name) is not None for name in SENSOR_ONLY_FIELDS
        ):
            raise ValueError(f"{', '.join(SENSOR_ONLY_FIELDS)} are only set when source is 'gps'")
        return self

    @property
    def has_authoritative_coordinates(self) -> bool:
        """True when the coordinates came from a sensor or a network lookup.

        Manual entries carry placeholder coordinates and consent fixes carry none.
        """
        if self.latitude is None or self.longitude is None:
            return False
        return self.source in (LocationSource.gps, LocationSource.ip_geolocation, LocationSource.cached)

    def as_fallback(
        self,
        reason: str,
        fallback_type: FallbackType,
        source: LocationSource | None = None,
    ) -> "LocationFix":
        """Return a validated copy tagged as a fallback result."""
        data: dict[str, Any] = self.model_dump()
        data.update(is_fallback=True, fallback_reason=reason, fallback_type=fallback_type)
        if source is not None:
            data["source"] = source
        if data["source"] is not LocationSource.gps:
            data.update(dict.fromkeys(SENSOR_ONLY_FIELDS))
        return LocationFix.model_validate(data)


class CachedFix(BaseModel):
    """The last acquired fix together with the instant it was stored."""

    fix: LocationFix
    saved_at: datetime


class ValidationResult(BaseModel):
    """Plausibility/freshness report for a fix. Warnings never affect validity."""

    is_valid: bool = True
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

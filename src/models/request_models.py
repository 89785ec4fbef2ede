from enum import Enum

from pydantic import BaseModel, Field

from src.models.location import LocationFix


class Provider(str, Enum):
    """Supported IP geolocation providers for the network location tier."""

    ipapi_co = "ipapi.co"
    ip_api_com = "ip-api.com"


class AcquisitionOptions(BaseModel):
    """Options for a single `get_current_position` call.

    `timeout_ms` and `maximum_age_ms` fall back to the configured defaults
    when omitted. With `allow_fallback=False` the caller gets the device's
    own error instead of a degraded fix.
    """

    allow_fallback: bool = True
    timeout_ms: int | None = Field(default=None, gt=0)
    enable_high_accuracy: bool = True
    maximum_age_ms: int | None = Field(default=None, ge=0)


class NetworkLocationRequest(BaseModel):
    """Query parameters for the network location endpoint."""

    provider: Provider = Field(
        default=Provider.ipapi_co,
        description="Upstream provider to use for the lookup. Defaults to ipapi.co.",
        examples=["ipapi.co", "ip-api.com"],
    )


class FixEnvelope(BaseModel):
    """Request body wrapping an optional fix for the describe/validate helpers."""

    fix: LocationFix | None = Field(
        default=None,
        description="The fix to inspect. Null means no location data is available.",
    )

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, field_validator


def utc_now() -> datetime:
    """Timezone-aware current instant; the default clock for every tier."""
    return datetime.now(timezone.utc)


class IPGeolocationData(BaseModel):
    """Normalized geolocation data returned by an IP provider.

    Provider clients map their own payloads into this shape so the network
    location tier never depends on a third-party response format.
    """

    ip: str
    country: str
    country_name: str
    region: str | None = None
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    timezone: str | None = None

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_lat_lon(cls, value: Any) -> float | None:
        """Allow latitude/longitude to be provided as strings, numbers, or null.

        Providers may return these fields as strings; this validator normalizes them
        into floats while gracefully handling missing or invalid values.
        """
        if value is None or value == "":
            return None
        try:
            # For general GPS and mapping, 5-6 decimal places (e.g., 34.052235)
            return round(float(value), 6)
        except (TypeError, ValueError):
            return None

import asyncio
from collections.abc import Callable
from datetime import datetime

from src.clients.base import BaseIPLookupClient
from src.logger import logger
from src.models.common import utc_now
from src.models.location import LocationFix, LocationSource

NETWORK_DEADLINE_SECONDS = 5.0
# IP-level precision is never better than ~10 km.
NETWORK_ACCURACY_METERS = 10_000


class NetworkLocationResolver:
    """Approximate position from the caller's public IP address.

    `resolve` never raises: provider errors, malformed payloads and the
    deadline all degrade to None so the fallback cascade can move on.
    """

    def __init__(
        self,
        client: BaseIPLookupClient,
        deadline_seconds: float = NETWORK_DEADLINE_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._deadline_seconds = deadline_seconds
        self._clock = clock

    async def resolve(self) -> LocationFix | None:
        try:
            data = await asyncio.wait_for(self._client.lookup_client_ip(), timeout=self._deadline_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Network location timed out after {self._deadline_seconds}s")
            return None
        except Exception as exc:
            logger.warning(f"Network location failed: {exc!r}")
            return None

        if data.latitude is None or data.longitude is None:
            logger.warning(f"Network location response has no coordinates ip={data.ip}")
            return None

        return LocationFix(
            latitude=data.latitude,
            longitude=data.longitude,
            accuracy=NETWORK_ACCURACY_METERS,
            timestamp=self._clock(),
            source=LocationSource.ip_geolocation,
            city=data.city,
            region=data.region,
            country=data.country_name or None,
        )

import asyncio
from collections.abc import Callable
from datetime import datetime

from src.errors import ProbeError, ProbeErrorKind
from src.location.ports import DevicePositionError, PositionSource
from src.models.common import utc_now
from src.models.location import LocationFix, LocationSource

PROBE_ERROR_MESSAGES: dict[ProbeErrorKind, str] = {
    ProbeErrorKind.permission_denied: (
        "Location access denied. Please allow location permissions in your browser settings."
    ),
    ProbeErrorKind.position_unavailable: (
        "Location information unavailable. Please check your device settings."
    ),
    ProbeErrorKind.timeout: (
        "Location request timed out. Please try again or check your internet connection."
    ),
}


class GeolocationProbe:
    """Issues one bounded-time request to the device positioning capability.

    Retrying is the caller's job; a single `acquire` call makes exactly one
    device request.
    """

    def __init__(self, source: PositionSource, clock: Callable[[], datetime] = utc_now) -> None:
        self._source = source
        self._clock = clock

    def is_supported(self) -> bool:
        return self._source.is_supported()

    async def acquire(self, timeout_ms: int, high_accuracy: bool, maximum_age_ms: int = 0) -> LocationFix:
        """Return a genuine GPS fix or raise a classified ProbeError."""
        try:
            position = await asyncio.wait_for(
                self._source.get_position(
                    enable_high_accuracy=high_accuracy,
                    timeout_ms=timeout_ms,
                    maximum_age_ms=maximum_age_ms,
                ),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError as exc:
            raise self._classify(ProbeErrorKind.timeout, exc) from exc
        except DevicePositionError as exc:
            raise self._classify_device_error(exc) from exc
        except Exception as exc:
            # A misbehaving source counts as an unavailable position so retries and fallback still run.
            message = str(exc) or PROBE_ERROR_MESSAGES[ProbeErrorKind.position_unavailable]
            raise ProbeError(message, kind=ProbeErrorKind.position_unavailable, original=exc) from exc

        return LocationFix(
            latitude=position.latitude,
            longitude=position.longitude,
            accuracy=position.accuracy,
            altitude=position.altitude,
            altitude_accuracy=position.altitude_accuracy,
            heading=position.heading,
            speed=position.speed,
            timestamp=self._clock(),
            source=LocationSource.gps,
        )

    @staticmethod
    def _classify(kind: ProbeErrorKind, original: BaseException) -> ProbeError:
        return ProbeError(PROBE_ERROR_MESSAGES[kind], kind=kind, original=original)

    def _classify_device_error(self, error: DevicePositionError) -> ProbeError:
        try:
            kind = ProbeErrorKind(error.code)
        except ValueError:
            # Unknown codes keep the device's own wording.
            return ProbeError(str(error), kind=ProbeErrorKind.position_unavailable, original=error)
        return self._classify(kind, error)

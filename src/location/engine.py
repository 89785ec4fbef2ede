"""Entry point for stamping attendance records with a location.

The engine drives the device probe through a bounded retry loop and, unless
the caller opts out, hands over to the fallback cascade so that attendance
marking is never blocked by a missing location. Two outcomes surface as
errors: a device failure when fallback is disallowed, and the operator
refusing to continue without a location.

Only one acquisition should be in flight per engine; overlapping calls are
not guarded against.
"""

from collections.abc import Callable
from datetime import datetime

from src.errors import GeolocationUnsupportedError, ProbeError, ProbeErrorKind
from src.location.cache import LocationCache
from src.location.cascade import FallbackCascade
from src.location.formatter import describe
from src.location.probe import GeolocationProbe
from src.location.validator import FixValidator
from src.logger import logger
from src.models.common import utc_now
from src.models.location import LocationFix, LocationSource, ValidationResult
from src.models.request_models import AcquisitionOptions
from src.settings import LocationSettings

GEOLOCATION_UNSUPPORTED_REASON = "Geolocation is not supported"


class LocationAcquisitionEngine:
    def __init__(
        self,
        probe: GeolocationProbe,
        cache: LocationCache,
        cascade: FallbackCascade,
        settings: LocationSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._probe = probe
        self._cache = cache
        self._cascade = cascade
        self._settings = settings or LocationSettings()
        self._validator = FixValidator(clock=clock, max_age_ms=self._settings.recent_max_age_ms)

    async def get_current_position(self, options: AcquisitionOptions | None = None) -> LocationFix:
        """Acquire a fix, degrading through the fallback tiers when allowed.

        Raises:
            ProbeError: every device attempt failed and `allow_fallback` is False.
                The last attempt's error is re-raised unchanged.
            GeolocationUnsupportedError: no device capability and `allow_fallback` is False.
            ConsentDeclinedError: the cascade reached the consent tier and the
                operator refused.
        """
        options = options or AcquisitionOptions()

        if not self._probe.is_supported():
            if not options.allow_fallback:
                raise GeolocationUnsupportedError(GEOLOCATION_UNSUPPORTED_REASON)
            return await self._fallback(GEOLOCATION_UNSUPPORTED_REASON)

        fix, last_error = await self._probe_with_retries(options)
        if fix is not None:
            logger.info(f"Location obtained from device accuracy={fix.accuracy}")
            self._cache.save(fix)
            return self._checked(fix)

        if not options.allow_fallback:
            raise last_error

        logger.info("Using fallback location strategy")
        return await self._fallback(last_error.message)

    async def _probe_with_retries(self, options: AcquisitionOptions) -> tuple[LocationFix | None, ProbeError | None]:
        max_retries = self._settings.max_retries
        timeout_ms = options.timeout_ms or self._settings.timeout_ms
        maximum_age_ms = (
            options.maximum_age_ms if options.maximum_age_ms is not None else self._settings.maximum_age_ms
        )
        high_accuracy = options.enable_high_accuracy
        last_error: ProbeError | None = None

        for attempt in range(1, max_retries + 1):
            logger.info(f"Location attempt {attempt}/{max_retries} high_accuracy={high_accuracy} timeout_ms={timeout_ms}")
            try:
                fix = await self._probe.acquire(timeout_ms, high_accuracy, maximum_age_ms)
            except ProbeError as exc:
                last_error = exc
                logger.warning(f"Location attempt {attempt} failed kind={exc.kind.name} error={exc.message}")
                if exc.kind is ProbeErrorKind.permission_denied:
                    break
                high_accuracy = False
                timeout_ms = self._settings.fallback_timeout_ms
                continue
            return fix, None

        return None, last_error

    async def _fallback(self, reason: str) -> LocationFix:
        fix = await self._cascade.resolve(reason)
        # Placeholder (manual) and missing (consent) coordinates are never reused,
        # and a re-used cached fix is already in storage. This deliberately narrows
        # "cache every successful acquisition" to fixes with real coordinates.
        if fix.has_authoritative_coordinates and fix.source is not LocationSource.cached:
            self._cache.save(fix)
        return self._checked(fix)

    def _checked(self, fix: LocationFix) -> LocationFix:
        result = self._validator.validate(fix)
        for warning in result.warnings:
            logger.warning(f"Location warning: {warning} description={describe(fix)!r}")
        return fix

    def validate(self, fix: LocationFix | None) -> ValidationResult:
        return self._validator.validate(fix)

    @staticmethod
    def describe(fix: LocationFix | None) -> str:
        return describe(fix)

    def clear_cache(self) -> None:
        self._cache.clear()

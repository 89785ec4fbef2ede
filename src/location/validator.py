from collections.abc import Callable
from datetime import datetime

from src.location.cache import RECENT_MAX_AGE_MS, is_recent
from src.models.common import utc_now
from src.models.location import LocationFix, ValidationResult

LOW_ACCURACY_THRESHOLD_METERS = 1000


class FixValidator:
    """Plausibility and freshness checks for a fix about to be used for attendance.

    Only a missing fix is invalid; everything else is reported as a warning
    so attendance marking is never blocked.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        max_age_ms: int = RECENT_MAX_AGE_MS,
    ) -> None:
        self._clock = clock
        self._max_age_ms = max_age_ms

    def validate(self, fix: LocationFix | None) -> ValidationResult:
        if fix is None:
            return ValidationResult(is_valid=False, errors=["No location data available"])

        result = ValidationResult()
        if fix.is_fallback:
            result.warnings.append(f"Using fallback location: {fix.fallback_reason}")
        if fix.accuracy is not None and fix.accuracy > LOW_ACCURACY_THRESHOLD_METERS:
            result.warnings.append("Location accuracy is low")
        if not is_recent(fix, self._max_age_ms, now=self._clock()):
            result.warnings.append("Location data is outdated")
        return result

from collections.abc import Callable
from datetime import datetime, timedelta

from pydantic import ValidationError

from src.location.ports import KeyValueStorage
from src.logger import logger
from src.models.common import utc_now
from src.models.location import CachedFix, LocationFix

DEFAULT_CACHE_KEY = "lastKnownLocation"
RECENT_MAX_AGE_MS = 1_800_000  # 30 minutes


class LocationCache:
    """Single-slot store for the last acquired fix.

    Reading never raises: an empty, unreadable or corrupt slot is a cache
    miss. Only an explicit `clear` removes the slot.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = DEFAULT_CACHE_KEY,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock

    def save(self, fix: LocationFix) -> None:
        cached = CachedFix(fix=fix, saved_at=self._clock())
        try:
            self._storage.set_item(self._key, cached.model_dump_json())
        except OSError as exc:
            logger.warning(f"Could not save location to storage: {exc!r}")

    def load(self) -> CachedFix | None:
        try:
            raw = self._storage.get_item(self._key)
        except OSError as exc:
            logger.warning(f"Could not retrieve location from storage: {exc!r}")
            return None
        if not raw:
            return None
        try:
            return CachedFix.model_validate_json(raw)
        except ValidationError:
            logger.warning(f"Ignoring corrupt cached location under key={self._key}")
            return None

    def clear(self) -> None:
        try:
            self._storage.remove_item(self._key)
        except OSError as exc:
            logger.warning(f"Could not clear stored location: {exc!r}")

    def is_recent(self, fix: LocationFix | None, max_age_ms: int = RECENT_MAX_AGE_MS) -> bool:
        """True when the fix is strictly younger than `max_age_ms`."""
        return is_recent(fix, max_age_ms, now=self._clock())


def is_recent(fix: LocationFix | None, max_age_ms: int = RECENT_MAX_AGE_MS, now: datetime | None = None) -> bool:
    if fix is None:
        return False
    now = now or utc_now()
    return now - fix.timestamp < timedelta(milliseconds=max_age_ms)

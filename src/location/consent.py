from collections.abc import Callable
from datetime import datetime

from src.errors import ConsentDeclinedError
from src.location.ports import LocationPrompt
from src.logger import logger
from src.models.common import utc_now
from src.models.location import FallbackType, LocationFix, LocationSource

CONSENT_NOTE = "User chose to proceed without location data"
CONSENT_DECLINED_MESSAGE = "User declined to mark attendance without location"


def consent_message(reason: str) -> str:
    return (
        f"Location access failed: {reason}\n\n"
        "Would you like to mark attendance without precise location data? "
        "This will be noted in your attendance record."
    )


class ConsentFallback:
    """Last tier: proceed without a location only if the operator agrees."""

    def __init__(self, prompt: LocationPrompt, clock: Callable[[], datetime] = utc_now) -> None:
        self._prompt = prompt
        self._clock = clock

    async def ask(self, reason: str) -> LocationFix:
        if not await self._prompt.prompt_confirm(consent_message(reason)):
            logger.warning(f"Operator declined to continue without location reason={reason!r}")
            raise ConsentDeclinedError(CONSENT_DECLINED_MESSAGE)

        return LocationFix(
            latitude=None,
            longitude=None,
            accuracy=None,
            timestamp=self._clock(),
            source=LocationSource.user_consent,
            is_fallback=True,
            fallback_reason=reason,
            fallback_type=FallbackType.user_consent,
            note=CONSENT_NOTE,
        )

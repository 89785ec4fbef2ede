import asyncio
from collections.abc import Callable
from datetime import datetime

from src.location.ports import LocationPrompt
from src.logger import logger
from src.models.common import utc_now
from src.models.location import LocationFix, LocationSource

MANUAL_INPUT_TIMEOUT_SECONDS = 30.0
MANUAL_ACCURACY_METERS = 1000

MANUAL_INPUT_MESSAGE = (
    "We couldn't detect your location automatically. "
    "Please enter your current location to mark attendance."
)
# The typed text is not geocoded, so the coordinates only mark operator intent.
PLACEHOLDER_COORDINATES_NOTE = "Coordinates are placeholders; the entered address was not geocoded"


class ManualInputCollector:
    """Asks the operator to type where they are.

    Cancel, blank input, a prompt failure or the deadline all yield None.
    """

    def __init__(
        self,
        prompt: LocationPrompt,
        timeout_seconds: float = MANUAL_INPUT_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._prompt = prompt
        self._timeout_seconds = timeout_seconds
        self._clock = clock

    async def collect(self) -> LocationFix | None:
        try:
            text = await asyncio.wait_for(
                self._prompt.prompt_text(MANUAL_INPUT_MESSAGE, self._timeout_seconds),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.info(f"Manual location input closed after {self._timeout_seconds}s without an answer")
            return None
        except Exception as exc:
            logger.warning(f"Manual location input failed: {exc!r}")
            return None

        address = (text or "").strip()
        if not address:
            logger.info("Manual location input skipped")
            return None

        return LocationFix(
            latitude=0.0,
            longitude=0.0,
            accuracy=MANUAL_ACCURACY_METERS,
            timestamp=self._clock(),
            source=LocationSource.manual_input,
            address=address,
            note=PLACEHOLDER_COORDINATES_NOTE,
        )

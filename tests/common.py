import asyncio
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from typing import Any

import httpx

from src.clients.base import BaseIPLookupClient
from src.location.ports import DevicePositionError, LocationPrompt, PositionSource
from src.models.common import IPGeolocationData
from src.models.location import DevicePosition, LocationFix, LocationSource

NOW = datetime(2024, 5, 6, 9, 30, tzinfo=timezone.utc)


class MockResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = text

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class MockAsyncClient:
    """Minimal async context-manager mock for httpx.AsyncClient."""

    def __init__(self, response: MockResponse) -> None:
        self._response = response

    async def __aenter__(self) -> "MockAsyncClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str) -> MockResponse:
        return self._response


class FailingAsyncClient:
    """Async client that raises a RequestError on enter to simulate network failure."""

    def __init__(self, url: str, *args: Any, **kwargs: Any) -> None:
        self._url = url

    async def __aenter__(self) -> "FailingAsyncClient":
        request = httpx.Request("GET", self._url)
        raise httpx.RequestError("Network failure", request=request)

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str) -> MockResponse:
        return MockResponse(status_code=HTTPStatus.OK, payload={})


class FixedClock:
    """Settable clock passed wherever production code takes `clock=`."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakePositionSource(PositionSource):
    """Device capability double that replays scripted outcomes.

    Each outcome is a DevicePosition (returned), an exception (raised) or the
    string "hang" (never answers, so the probe deadline fires).
    """

    def __init__(self, *outcomes: Any, supported: bool = True) -> None:
        self._outcomes = list(outcomes)
        self._supported = supported
        self.calls: list[dict[str, Any]] = []

    def is_supported(self) -> bool:
        return self._supported

    async def get_position(self, enable_high_accuracy: bool, timeout_ms: int, maximum_age_ms: int) -> DevicePosition:
        self.calls.append(
            {
                "enable_high_accuracy": enable_high_accuracy,
                "timeout_ms": timeout_ms,
                "maximum_age_ms": maximum_age_ms,
            }
        )
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if outcome == "hang":
            await asyncio.Event().wait()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def denied() -> DevicePositionError:
    return DevicePositionError(1, "User denied Geolocation")


def unavailable() -> DevicePositionError:
    return DevicePositionError(2, "Position unavailable")


def timed_out() -> DevicePositionError:
    return DevicePositionError(3, "Timeout expired")


GOOD_POSITION = DevicePosition(
    latitude=28.5355,
    longitude=77.391,
    accuracy=8.0,
    altitude=200.0,
    altitude_accuracy=3.0,
    heading=90.0,
    speed=0.5,
)


class ScriptedPrompt(LocationPrompt):
    """Headless UI double with canned answers.

    `text` may be a string, None (cancel), an exception, or "hang" to never answer.
    """

    def __init__(self, text: Any = None, confirm: bool = False) -> None:
        self._text = text
        self._confirm = confirm
        self.text_calls: list[tuple[str, float]] = []
        self.confirm_calls: list[str] = []

    async def prompt_text(self, message: str, timeout_seconds: float) -> str | None:
        self.text_calls.append((message, timeout_seconds))
        if self._text == "hang":
            await asyncio.Event().wait()
        if isinstance(self._text, BaseException):
            raise self._text
        return self._text

    async def prompt_confirm(self, message: str) -> bool:
        self.confirm_calls.append(message)
        return self._confirm


class StubIpClient(BaseIPLookupClient):
    """IP client double returning fixed data, raising, or hanging."""

    def __init__(self, result: Any) -> None:
        self._result = result
        self.calls = 0

    async def lookup_client_ip(self) -> IPGeolocationData:
        self.calls += 1
        if self._result == "hang":
            await asyncio.Event().wait()
        if isinstance(self._result, BaseException):
            raise self._result
        return self._result


BERLIN = IPGeolocationData(
    ip="198.51.100.42",
    country="DE",
    country_name="Germany",
    region="Berlin",
    city="Berlin",
    latitude=52.52,
    longitude=13.405,
)


def make_fix(**overrides: Any) -> LocationFix:
    """A genuine GPS fix taken at NOW, with any field overridden."""
    fields: dict[str, Any] = {
        "latitude": 28.5355,
        "longitude": 77.391,
        "accuracy": 8.0,
        "timestamp": NOW,
        "source": LocationSource.gps,
    }
    fields.update(overrides)
    return LocationFix(**fields)

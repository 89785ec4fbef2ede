"""Capabilities the acquisition engine consumes but does not own.

The device positioning hardware, the durable key-value store and the
interactive UI are injected through these interfaces, so the orchestration
can run headless in tests with scripted doubles.
"""

from abc import ABC, abstractmethod

from src.models.location import DevicePosition


class DevicePositionError(Exception):
    """Error reported by the device positioning capability.

    `code` follows the W3C geolocation numbering: 1 permission denied,
    2 position unavailable, 3 timeout.
    """

    def __init__(self, code: int, message: str = "") -> None:
        super().__init__(message or f"Device positioning failed with code {code}")
        self.code = code
        self.message = message


class PositionSource(ABC):
    """Device positioning capability."""

    def is_supported(self) -> bool:
        """Whether the device exposes a positioning capability at all."""
        return True

    @abstractmethod
    async def get_position(
        self,
        enable_high_accuracy: bool,
        timeout_ms: int,
        maximum_age_ms: int,
    ) -> DevicePosition:
        """Return one reading or raise DevicePositionError."""
        raise NotImplementedError


class KeyValueStorage(ABC):
    """Durable string key-value storage that outlives the process."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class LocationPrompt(ABC):
    """Modal UI surface used by the manual-input and consent tiers."""

    @abstractmethod
    async def prompt_text(self, message: str, timeout_seconds: float) -> str | None:
        """Ask for a single line of text; None means the operator cancelled."""
        raise NotImplementedError

    @abstractmethod
    async def prompt_confirm(self, message: str) -> bool:
        """Ask a yes/no question."""
        raise NotImplementedError

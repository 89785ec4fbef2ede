from enum import IntEnum


class AppError(Exception):
    """Base application error for the attendance location service."""


class IpProviderError(AppError):
    """Base error for IP geolocation provider failures."""


class ReservedIpError(IpProviderError):
    """Raised when the caller's IP address is reserved/private (e.g. 127.0.0.1, 192.168.x.x)."""


class IpNotFoundError(IpProviderError):
    """Raised when no geolocation information is found for the IP."""


class UpstreamServiceError(IpProviderError):
    """Raised when the upstream IP provider fails."""


class AcquisitionError(AppError):
    """Base error for a location acquisition that could not produce a fix."""


class ProbeErrorKind(IntEnum):
    """Device positioning failure kinds, numbered like the W3C error codes."""

    permission_denied = 1
    position_unavailable = 2
    timeout = 3


class ProbeError(AcquisitionError):
    """Raised when a single device positioning attempt fails.

    The classified `kind` and the underlying exception (if any) are kept so
    the retry loop and callers can inspect them.
    """

    def __init__(self, message: str, kind: ProbeErrorKind, original: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.original = original


class GeolocationUnsupportedError(AcquisitionError):
    """Raised when the device has no positioning capability and fallback is disallowed."""


class ConsentDeclinedError(AcquisitionError):
    """Raised when the operator refuses to mark attendance without a location."""

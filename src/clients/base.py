from abc import ABC, abstractmethod

from src.models.common import IPGeolocationData


class BaseIPLookupClient(ABC):
    """Abstract base for IP geolocation clients used by the network location tier.

    Concrete implementations map provider-specific responses into the
    normalized IPGeolocationData shape and raise IpProviderError subclasses
    on failure; the network tier decides what to do with those failures.
    """

    @abstractmethod
    async def lookup_client_ip(self) -> IPGeolocationData:
        """Look up geolocation information for the caller's public IP address."""
        raise NotImplementedError

from collections.abc import Callable
from datetime import datetime

from src.clients.base import BaseIPLookupClient
from src.clients.ip_api_co_client import IpApiCo
from src.clients.ip_api_com_client import IpApiCom
from src.location.cache import LocationCache
from src.location.cascade import FallbackCascade
from src.location.consent import ConsentFallback
from src.location.engine import LocationAcquisitionEngine
from src.location.manual_input import ManualInputCollector
from src.location.network import NetworkLocationResolver
from src.location.ports import KeyValueStorage, LocationPrompt, PositionSource
from src.location.probe import GeolocationProbe
from src.models.common import utc_now
from src.models.request_models import Provider
from src.settings import LocationSettings


class IpLookupProviderFactory:
    """Factory for IP lookup provider clients.

    Given a Provider enum, returns a concrete client instance.
    """

    PROVIDERS_MAP: dict[Provider, type[BaseIPLookupClient]] = {
        Provider.ipapi_co: IpApiCo,
        Provider.ip_api_com: IpApiCom,
    }

    def __init__(self, timeout_seconds: float = 5.0) -> None:
        self._timeout_seconds = timeout_seconds

    def __call__(self, provider: Provider) -> BaseIPLookupClient:
        client_cls = self.PROVIDERS_MAP[provider]
        return client_cls(timeout_seconds=self._timeout_seconds)


def build_network_resolver(
    settings: LocationSettings,
    provider: Provider | None = None,
    clock: Callable[[], datetime] = utc_now,
    client: BaseIPLookupClient | None = None,
) -> NetworkLocationResolver:
    if client is None:
        factory = IpLookupProviderFactory(timeout_seconds=settings.network_timeout_seconds)
        client = factory(provider or settings.ip_provider)
    return NetworkLocationResolver(client, deadline_seconds=settings.network_timeout_seconds, clock=clock)


def build_location_engine(
    position_source: PositionSource,
    storage: KeyValueStorage,
    prompt: LocationPrompt,
    settings: LocationSettings | None = None,
    clock: Callable[[], datetime] = utc_now,
    ip_client: BaseIPLookupClient | None = None,
) -> LocationAcquisitionEngine:
    """Wire every acquisition tier from settings.

    Called once at application start; the storage outlives the engine.
    `ip_client` overrides the provider picked by `settings.ip_provider`.
    """
    settings = settings or LocationSettings()
    cache = LocationCache(storage, key=settings.cache_key, clock=clock)
    cascade = FallbackCascade(
        cache=cache,
        network=build_network_resolver(settings, clock=clock, client=ip_client),
        manual=ManualInputCollector(prompt, timeout_seconds=settings.manual_input_timeout_seconds, clock=clock),
        consent=ConsentFallback(prompt, clock=clock),
        recent_max_age_ms=settings.recent_max_age_ms,
    )
    return LocationAcquisitionEngine(
        probe=GeolocationProbe(position_source, clock=clock),
        cache=cache,
        cascade=cascade,
        settings=settings,
        clock=clock,
    )

from src.location.cache import RECENT_MAX_AGE_MS, LocationCache
from src.location.consent import ConsentFallback
from src.location.manual_input import ManualInputCollector
from src.location.network import NetworkLocationResolver
from src.logger import logger
from src.models.location import FallbackType, LocationFix, LocationSource

DEFAULT_FALLBACK_REASON = "Location access failed"


class FallbackCascade:
    """Degraded strategies tried in order once the device sensor gave up.

    cached -> network -> manual -> consent. The first tier that yields a fix
    wins and later tiers are never touched. Only the consent tier can fail,
    and its refusal propagates.
    """

    def __init__(
        self,
        cache: LocationCache,
        network: NetworkLocationResolver,
        manual: ManualInputCollector,
        consent: ConsentFallback,
        recent_max_age_ms: int = RECENT_MAX_AGE_MS,
    ) -> None:
        self._cache = cache
        self._network = network
        self._manual = manual
        self._consent = consent
        self._recent_max_age_ms = recent_max_age_ms

    async def resolve(self, reason: str) -> LocationFix:
        reason = reason.strip() or DEFAULT_FALLBACK_REASON
        logger.info(f"Attempting fallback location methods reason={reason!r}")

        cached = self._cache.load()
        if cached is not None and self._cache.is_recent(cached.fix, self._recent_max_age_ms):
            logger.info("Using recent cached location")
            return cached.fix.as_fallback(reason, FallbackType.cached, source=LocationSource.cached)

        network_fix = await self._network.resolve()
        if network_fix is not None:
            logger.info("Using network-based location")
            return network_fix.as_fallback(reason, FallbackType.network)

        manual_fix = await self._manual.collect()
        if manual_fix is not None:
            logger.info("Using manual location input")
            return manual_fix.as_fallback(reason, FallbackType.manual)

        logger.info("Asking operator to continue without location")
        return await self._consent.ask(reason)

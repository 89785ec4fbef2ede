from http import HTTPStatus
from typing import Any

import httpx

from src.clients.base import BaseIPLookupClient
from src.errors import IpNotFoundError, ReservedIpError, UpstreamServiceError
from src.models.common import IPGeolocationData


class IpApiCom(BaseIPLookupClient):
    """Client for the http://ip-api.com JSON API (no API key required)."""

    def __init__(self, base_url: str = "http://ip-api.com", timeout_seconds: float = 5.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    async def lookup_client_ip(self) -> IPGeolocationData:
        """Look up geolocation information for the calling client IP.

        ip-api.com answers with a `status` of "success" or "fail"; failures
        are turned into typed exceptions.
        """
        url = f"{self._base_url}/json/"
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                response = await client.get(url)
        except httpx.RequestError as exc:
            raise UpstreamServiceError(f"Request to IP provider failed: {repr(exc)}") from exc

        if response.status_code == HTTPStatus.TOO_MANY_REQUESTS:
            raise UpstreamServiceError("IP provider rate limit or quota exceeded (HTTP 429).")
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            raise UpstreamServiceError(f"IP provider returned HTTP {response.status_code}: {response.text}")

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamServiceError(f"Failed to decode IP provider response as JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise UpstreamServiceError("IP provider returned a non-object JSON payload.")

        self._handle_provider_status(data)
        return self._normalize_payload(data)

    @staticmethod
    def _handle_provider_status(data: dict[str, Any]) -> None:
        status_value = str(data.get("status") or "").lower()
        if status_value == "success":
            return

        message = str(data.get("message") or "Unknown error from ip-api.com")
        lower_msg = message.lower()

        if "private range" in lower_msg or "reserved range" in lower_msg:
            raise ReservedIpError(message)
        if "quota" in lower_msg or "limit" in lower_msg:
            raise UpstreamServiceError(f"IP provider rate limit or quota exceeded: {message}")
        if "not found" in lower_msg:
            raise IpNotFoundError(message)
        raise UpstreamServiceError(message)

    @staticmethod
    def _normalize_payload(data: dict[str, Any]) -> IPGeolocationData:
        """Map ip-api.com's response into our normalized schema."""
        region = str(data.get("regionName") or data.get("region") or "") or None

        return IPGeolocationData(
            ip=str(data.get("query") or ""),
            country=str(data.get("countryCode") or ""),
            country_name=str(data.get("country") or ""),
            region=region,
            city=data.get("city"),
            latitude=data.get("lat"),
            longitude=data.get("lon"),
            timezone=data.get("timezone"),
        )

from http import HTTPStatus
from typing import Any

import httpx

from src.clients.base import BaseIPLookupClient
from src.errors import IpNotFoundError, ReservedIpError, UpstreamServiceError
from src.models.common import IPGeolocationData


class IpApiCo(BaseIPLookupClient):
    """Client for the https://ipapi.co/ IP geolocation API.

    Only the caller's own address is ever looked up: the network tier wants
    an approximate position for this device, not for an arbitrary IP.
    """

    def __init__(self, base_url: str = "https://ipapi.co", timeout_seconds: float = 5.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    async def lookup_client_ip(self) -> IPGeolocationData:
        """Look up geolocation information for the calling client IP."""
        url = f"{self._base_url}/json/"
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                response = await client.get(url)
        except httpx.RequestError as exc:
            raise UpstreamServiceError(f"Request to IP provider failed: {repr(exc)}") from exc

        self._handle_http_errors(response)

        data = self._parse_json(response)
        self._handle_provider_error(data)

        return self._normalize_payload(data)

    def _handle_http_errors(self, response: httpx.Response) -> None:
        """Map HTTP status codes from the provider to domain-specific errors."""
        status_code = response.status_code

        if status_code == HTTPStatus.NOT_FOUND:
            raise IpNotFoundError("No geolocation information found for this IP address.")
        if status_code == HTTPStatus.FORBIDDEN:
            raise UpstreamServiceError("Authentication with IP provider failed (HTTP 403).")
        if status_code == HTTPStatus.TOO_MANY_REQUESTS:
            # 429 Quota exceeded / rate limit hit.
            raise UpstreamServiceError("IP provider rate limit or quota exceeded (HTTP 429).")
        if status_code >= HTTPStatus.BAD_REQUEST:
            raise UpstreamServiceError(f"IP provider returned HTTP {status_code}: {response.text}")

    def _handle_provider_error(self, data: dict[str, Any]) -> None:
        """Normalize error payloads that ipapi.co embeds in a HTTP 200 body.

        Examples:
            { "error": true, "reason": "Reserved IP Address", "ip": "127.0.0.1", "reserved": true }
            { "error": true, "reason": "RateLimited", "message": "..." }
        """
        if not data.get("error"):
            return

        reason = str(data.get("reason") or data.get("message") or "Unknown error from ipapi.co")
        lower_reason = reason.lower()

        if "reserved" in lower_reason or data.get("reserved") is True:
            raise ReservedIpError(reason)

        if "ratelimited" in lower_reason or "quota" in lower_reason:
            raise UpstreamServiceError(f"IP provider rate limit or quota exceeded: {reason}")

        raise UpstreamServiceError(reason)

    @staticmethod
    def _parse_json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamServiceError(f"Failed to decode IP provider response as JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise UpstreamServiceError("IP provider returned a non-object JSON payload.")
        return data

    @staticmethod
    def _normalize_payload(data: dict[str, Any]) -> IPGeolocationData:
        """Map ipapi.co's response into our normalized schema."""
        return IPGeolocationData(
            ip=str(data.get("ip") or ""),
            country=str(data.get("country") or ""),
            country_name=str(data.get("country_name") or ""),
            region=data.get("region"),
            city=data.get("city"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            timezone=data.get("timezone"),
        )

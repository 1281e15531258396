"""Cloudflare REST API client."""

from dataclasses import dataclass
from typing import Any

import httpx

from sheepit.config import settings
from sheepit.providers.base import ProviderClient
from sheepit.providers.vercel import FALLBACK_CNAME_TARGET


@dataclass(frozen=True)
class Zone:
    id: str
    name: str
    status: str


@dataclass(frozen=True)
class DnsRecord:
    id: str
    name: str
    type: str
    content: str


class CloudflareClient(ProviderClient):
    """Cloudflare client: token checks, zone listing and DNS records."""

    provider = "Cloudflare"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(base_url or settings.cloudflare_api_url, timeout, transport)

    def _result(self, data: Any, operation: str) -> Any:
        """Unwrap Cloudflare's ``{success, result}`` envelope."""
        if not isinstance(data, dict) or not data.get("success"):
            raise self._error(operation, "returned unsuccessful response")
        return self._field(data, "result", operation)

    async def verify_token(self, token: str) -> dict:
        """Verify the token exists and is active."""
        data = await self._request(token, "GET", "/user/tokens/verify", "verifyToken")
        result = self._result(data, "verifyToken")
        if not isinstance(result, dict) or result.get("status") != "active":
            raise self._error("verifyToken", "token is not active")
        return result

    async def list_zones(self, token: str) -> list[Zone]:
        """List active zones the token can manage."""
        data = await self._request(
            token,
            "GET",
            "/zones",
            "listZones",
            params={"status": "active", "per_page": 50},
        )
        result = self._result(data, "listZones")
        if not isinstance(result, list):
            raise self._error("listZones", "unexpected response shape")
        return [
            Zone(id=z["id"], name=z["name"], status=z.get("status", ""))
            for z in result
            if isinstance(z, dict) and "id" in z and "name" in z
        ]

    async def create_dns_record(
        self,
        token: str,
        zone_id: str,
        name: str,
        content: str = FALLBACK_CNAME_TARGET,
    ) -> DnsRecord:
        """Create an unproxied CNAME record with automatic TTL."""
        data = await self._request(
            token,
            "POST",
            f"/zones/{zone_id}/dns_records",
            "createDnsRecord",
            json={
                "type": "CNAME",
                "name": name,
                "content": content,
                "proxied": False,
                "ttl": 1,  # automatic
            },
        )
        result = self._result(data, "createDnsRecord")
        return DnsRecord(
            id=self._field(result, "id", "createDnsRecord"),
            name=result.get("name", name),
            type=result.get("type", "CNAME"),
            content=result.get("content", content),
        )

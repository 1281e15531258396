"""Shared request handling for provider clients.

Every provider call goes through :meth:`ProviderClient._request`, which
turns transport failures, non-2xx responses and unparseable bodies into
a single :class:`ProviderError`. No retries happen at this layer.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from typing import Any

import httpx

from sheepit.config import settings
from sheepit.core.exceptions import ProviderError


class ProviderClient:
    """Base for stateless provider clients.

    A client holds only its endpoint configuration; the bearer token is
    passed to every call and never stored.
    """

    provider: str = "provider"

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.provider_timeout_seconds
        self._transport = transport

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            yield client

    def _error(
        self,
        operation: str,
        message: str,
        status: int | None = None,
        body: str | None = None,
    ) -> ProviderError:
        return ProviderError(self.provider, operation, message, status=status, body=body)

    async def _send(
        self,
        client: httpx.AsyncClient,
        token: str,
        method: str,
        path: str,
        operation: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            return await client.request(
                method,
                path,
                headers=self._headers(token),
                json=json,
                params=params,
            )
        except httpx.HTTPError as e:
            raise self._error(operation, f"network error: {e}") from e

    def _parse(self, response: httpx.Response, operation: str) -> Any:
        if not response.is_success:
            raise self._error(
                operation,
                response.reason_phrase or "request failed",
                status=response.status_code,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError as e:
            raise self._error(
                operation,
                "malformed JSON response",
                status=response.status_code,
                body=response.text,
            ) from e

    async def _request(
        self,
        token: str,
        method: str,
        path: str,
        operation: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> Any:
        """Issue one call and return the parsed JSON body."""
        if client is not None:
            response = await self._send(
                client, token, method, path, operation, json=json, params=params
            )
            return self._parse(response, operation)

        async with self._session() as session:
            response = await self._send(
                session, token, method, path, operation, json=json, params=params
            )
            return self._parse(response, operation)

    def _field(self, data: Any, key: str, operation: str) -> Any:
        """Pull a required key out of a JSON object."""
        if not isinstance(data, dict) or key not in data:
            raise self._error(operation, f"unexpected response shape: missing '{key}'")
        return data[key]

"""Async HTTP client for the SheepIt API."""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx

from sheepit.config import settings
from sheepit.core.exceptions import ApiRequestError
from sheepit.models.files import EnvVar, FileEntry
from sheepit.models.pipeline import (
    DeployResult,
    DomainResult,
    PushResult,
    StatusView,
)
from sheepit.models.project import Project
from sheepit.models.user import UserResponse


class SheepItClient:
    """Calls the ``/v1`` API on behalf of one session user."""

    def __init__(
        self,
        base_url: str | None = None,
        user_id: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.user_id = user_id
        self.timeout = timeout if timeout is not None else settings.provider_timeout_seconds
        self.transport = transport

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        headers = {"X-User-Id": self.user_id} if self.user_id else {}
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            yield client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        async with self._session() as client:
            response = await client.request(method, f"/v1{path}", **kwargs)

        if response.is_success:
            return response.json() if response.content else None

        try:
            message = response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            message = response.text or response.reason_phrase
        raise ApiRequestError(response.status_code, message)

    async def register(self, github_token: str) -> UserResponse:
        """Register (or refresh) the session user and adopt its id."""
        data = await self._request("POST", "/users", json={"github_token": github_token})
        user = UserResponse.model_validate(data)
        self.user_id = user.id
        return user

    async def create_project(self, name: str) -> Project:
        data = await self._request("POST", "/projects", json={"name": name})
        return Project.model_validate(data["project"])

    async def push(
        self,
        project_id: str,
        files: list[FileEntry],
        repo_name: str | None = None,
    ) -> PushResult:
        payload = {
            "files": [f.model_dump() for f in files],
            "repo_name": repo_name,
        }
        data = await self._request("POST", f"/projects/{project_id}/push", json=payload)
        return PushResult.model_validate(data)

    async def deploy(
        self,
        project_id: str,
        vercel_project_name: str | None = None,
        env_vars: list[EnvVar] | None = None,
    ) -> DeployResult:
        payload = {
            "vercel_project_name": vercel_project_name,
            "env_vars": [e.model_dump() for e in env_vars] if env_vars else None,
        }
        data = await self._request("POST", f"/projects/{project_id}/deploy", json=payload)
        return DeployResult.model_validate(data)

    async def get_status(self, project_id: str) -> StatusView:
        data = await self._request("GET", f"/projects/{project_id}/status")
        return StatusView.model_validate(data)

    async def set_domain(
        self,
        project_id: str,
        zone_id: str,
        zone_name: str,
        subdomain: str | None = None,
    ) -> DomainResult:
        payload = {"zone_id": zone_id, "zone_name": zone_name, "subdomain": subdomain}
        data = await self._request("POST", f"/projects/{project_id}/domain", json=payload)
        return DomainResult.model_validate(data)

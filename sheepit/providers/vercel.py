"""Vercel REST API client."""

from collections.abc import Iterable
from dataclasses import dataclass, field

import httpx

from sheepit.config import settings
from sheepit.models.files import EnvVar
from sheepit.providers.base import ProviderClient

FALLBACK_CNAME_TARGET = "cname.vercel-dns.com"
ENV_TARGETS = ["production", "preview", "development"]


@dataclass(frozen=True)
class VercelProject:
    id: str
    name: str


@dataclass(frozen=True)
class VercelDeployment:
    id: str
    url: str
    ready_state: str


@dataclass(frozen=True)
class GitNamespace:
    id: str
    name: str
    slug: str
    owner_type: str | None = None


@dataclass(frozen=True)
class DomainConfig:
    misconfigured: bool = False
    configured_by: str | None = None
    recommended_cname: list[dict] = field(default_factory=list)

    def cname_target(self) -> str:
        """The rank-1 CNAME recommendation, else the generic Vercel target."""
        for record in self.recommended_cname:
            if record.get("rank") == 1 and record.get("value"):
                return record["value"]
        return FALLBACK_CNAME_TARGET


class VercelClient(ProviderClient):
    """Vercel client: projects, deployments, domains and env vars."""

    provider = "Vercel"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(base_url or settings.vercel_api_url, timeout, transport)

    async def create_project(
        self,
        token: str,
        name: str,
        git_repo: str | None = None,
        framework: str | None = None,
        build_command: str | None = None,
        output_directory: str | None = None,
    ) -> VercelProject:
        """Create a project, optionally bound to a GitHub ``owner/name`` repo."""
        body: dict[str, object] = {"name": name}
        if framework:
            body["framework"] = framework
        if git_repo:
            body["gitRepository"] = {"type": "github", "repo": git_repo}
        if build_command:
            body["buildCommand"] = build_command
        if output_directory:
            body["outputDirectory"] = output_directory

        data = await self._request(token, "POST", "/v10/projects", "createProject", json=body)
        return VercelProject(
            id=self._field(data, "id", "createProject"),
            name=data.get("name", name),
        )

    async def create_deployment(
        self,
        token: str,
        name: str,
        org: str,
        repo: str,
        ref: str = "main",
    ) -> VercelDeployment:
        """Trigger a deployment of a git ref."""
        data = await self._request(
            token,
            "POST",
            "/v13/deployments",
            "createDeployment",
            params={"skipAutoDetectionConfirmation": "1"},
            json={
                "name": name,
                "gitSource": {"type": "github", "org": org, "repo": repo, "ref": ref},
            },
        )
        return VercelDeployment(
            id=self._field(data, "id", "createDeployment"),
            url=data.get("url") or "",
            ready_state=data.get("readyState") or "QUEUED",
        )

    async def get_deployment(self, token: str, deployment_id: str) -> VercelDeployment:
        """Fetch a deployment's current state."""
        data = await self._request(
            token, "GET", f"/v13/deployments/{deployment_id}", "getDeployment"
        )
        ready_state = self._field(data, "readyState", "getDeployment")
        if not isinstance(ready_state, str):
            raise self._error("getDeployment", "unexpected readyState")
        return VercelDeployment(
            id=data.get("id") or deployment_id,
            url=data.get("url") or "",
            ready_state=ready_state,
        )

    async def add_domain(self, token: str, project_id: str, domain: str) -> dict:
        """Attach a custom domain to a project."""
        return await self._request(
            token,
            "POST",
            f"/v10/projects/{project_id}/domains",
            "addDomain",
            json={"name": domain},
        )

    async def get_domain_config(self, token: str, domain: str) -> DomainConfig:
        """Get the recommended DNS records for a domain."""
        data = await self._request(token, "GET", f"/v6/domains/{domain}/config", "getDomainConfig")
        if not isinstance(data, dict):
            raise self._error("getDomainConfig", "unexpected response shape")
        return DomainConfig(
            misconfigured=bool(data.get("misconfigured", False)),
            configured_by=data.get("configuredBy"),
            recommended_cname=list(data.get("recommendedCNAME") or []),
        )

    async def set_env_vars(
        self, token: str, project_id: str, env_vars: Iterable[EnvVar]
    ) -> None:
        """Create encrypted env vars for every target, one request per key."""
        async with self._session() as client:
            for env_var in env_vars:
                await self._request(
                    token,
                    "POST",
                    f"/v10/projects/{project_id}/env",
                    f"setEnvVar({env_var.key})",
                    json={
                        "key": env_var.key,
                        "value": env_var.value,
                        "type": "encrypted",
                        "target": ENV_TARGETS,
                    },
                    client=client,
                )

    async def get_git_namespaces(self, token: str) -> list[GitNamespace]:
        """GitHub accounts and orgs with the Vercel GitHub App installed."""
        data = await self._request(
            token,
            "GET",
            "/v1/integrations/git-namespaces",
            "getGitNamespaces",
            params={"provider": "github"},
        )
        if not isinstance(data, list):
            raise self._error("getGitNamespaces", "unexpected response shape")
        return [
            GitNamespace(
                id=str(item.get("id") or ""),
                name=str(item.get("name") or ""),
                slug=str(item.get("slug") or ""),
                owner_type=item.get("ownerType"),
            )
            for item in data
            if isinstance(item, dict)
        ]

    async def is_github_app_installed(self, token: str, github_username: str) -> bool:
        """Check for a namespace whose slug matches the GitHub username."""
        username = github_username.lower()
        namespaces = await self.get_git_namespaces(token)
        return any(ns.slug.lower() == username for ns in namespaces)

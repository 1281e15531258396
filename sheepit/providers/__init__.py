"""Provider clients for GitHub, Vercel and Cloudflare."""

from dataclasses import dataclass, field

from sheepit.providers.base import ProviderClient
from sheepit.providers.cloudflare import CloudflareClient, DnsRecord, Zone
from sheepit.providers.github import GitHubClient, GitHubRepo, GitHubUser
from sheepit.providers.vercel import (
    FALLBACK_CNAME_TARGET,
    DomainConfig,
    GitNamespace,
    VercelClient,
    VercelDeployment,
    VercelProject,
)


@dataclass
class Providers:
    """The three provider clients used by the orchestrator."""

    github: GitHubClient = field(default_factory=GitHubClient)
    vercel: VercelClient = field(default_factory=VercelClient)
    cloudflare: CloudflareClient = field(default_factory=CloudflareClient)


__all__ = [
    "Providers",
    "ProviderClient",
    "GitHubClient",
    "GitHubRepo",
    "GitHubUser",
    "VercelClient",
    "VercelProject",
    "VercelDeployment",
    "DomainConfig",
    "GitNamespace",
    "FALLBACK_CNAME_TARGET",
    "CloudflareClient",
    "Zone",
    "DnsRecord",
]

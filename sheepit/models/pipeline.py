"""Request and result models for the push, deploy, domain and status phases."""

from pydantic import BaseModel, Field

from sheepit.models.deployment import DeploymentStatus, DeploymentSummary
from sheepit.models.files import EnvVar, FileEntry
from sheepit.models.project import DomainStatus, ProjectSummary


class PushRequest(BaseModel):
    """Upload a file batch and push it to GitHub."""

    files: list[FileEntry] = Field(default_factory=list)
    repo_name: str | None = None


class PushResult(BaseModel):
    github_repo: str
    github_url: str
    framework: str | None = None
    file_count: int
    commit_sha: str


class DeployRequest(BaseModel):
    """Provision hosting (if needed) and trigger a deployment."""

    vercel_project_name: str | None = None
    env_vars: list[EnvVar] | None = None


class DeployResult(BaseModel):
    deployment_id: str
    vercel_deployment_id: str
    status: DeploymentStatus


class DomainRequest(BaseModel):
    """Attach a custom domain from a Cloudflare zone."""

    zone_id: str = Field(..., min_length=1)
    zone_name: str = Field(..., min_length=1)
    subdomain: str | None = None

    @property
    def full_domain(self) -> str:
        label = (self.subdomain or "").strip()
        if not label or label == "@":
            return self.zone_name
        return f"{label}.{self.zone_name}"


class DomainResult(BaseModel):
    custom_domain: str | None = None
    domain_status: DomainStatus | None = None


class StatusView(BaseModel):
    """Current project and latest deployment, as seen by the poller."""

    project: ProjectSummary
    deployment: DeploymentSummary | None = None

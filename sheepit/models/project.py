"""Project-related data models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from sheepit.utils.ids import generate_id, generate_subdomain


class ProjectStatus(str, Enum):
    """Project lifecycle status."""

    CREATED = "created"
    UPLOADING = "uploading"
    DEPLOYING = "deploying"
    LIVE = "live"
    FAILED = "failed"

    def can_transition_to(self, target: "ProjectStatus") -> bool:
        """Check a status change against the transition table."""
        if target == self:
            return True
        return self in _TRANSITIONS[target]

    @property
    def is_terminal(self) -> bool:
        return self in (ProjectStatus.LIVE, ProjectStatus.FAILED)


# Keyed by target status: the statuses a project may move from.
_TRANSITIONS: dict[ProjectStatus, frozenset[ProjectStatus]] = {
    ProjectStatus.CREATED: frozenset(),
    ProjectStatus.UPLOADING: frozenset(
        {ProjectStatus.CREATED, ProjectStatus.FAILED, ProjectStatus.LIVE}
    ),
    ProjectStatus.DEPLOYING: frozenset(ProjectStatus),
    ProjectStatus.LIVE: frozenset(
        {ProjectStatus.CREATED, ProjectStatus.UPLOADING, ProjectStatus.DEPLOYING}
    ),
    ProjectStatus.FAILED: frozenset(
        {ProjectStatus.CREATED, ProjectStatus.UPLOADING, ProjectStatus.DEPLOYING}
    ),
}


class DomainStatus(str, Enum):
    """Custom domain setup status."""

    PENDING = "pending"
    ACTIVE = "active"
    ERROR = "error"


class Project(BaseModel):
    """A deployable project owned by one user."""

    id: str = Field(default_factory=generate_id)
    user_id: str
    name: str
    subdomain: str = Field(default_factory=generate_subdomain)
    status: ProjectStatus = ProjectStatus.CREATED

    # Detection results
    framework: str | None = None
    build_command: str | None = None
    output_directory: str | None = None

    # Provider links (opaque, unverified)
    github_repo: str | None = None
    vercel_project_id: str | None = None
    deployment_url: str | None = None

    # Custom domain
    custom_domain: str | None = None
    domain_status: DomainStatus | None = None

    # Presentation
    description: str | None = None
    is_public: bool = True
    og_image: str | None = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def repo_owner_and_name(self) -> tuple[str, str]:
        """Split the linked ``owner/name`` repository identity."""
        if not self.github_repo:
            raise ValueError("Project has no linked GitHub repository")
        owner, _, name = self.github_repo.partition("/")
        return owner, name


class ProjectCreate(BaseModel):
    """Request model for creating a new project."""

    name: str = Field(..., min_length=1, max_length=100)


class ProjectUpdate(BaseModel):
    """Request model for editing presentation fields."""

    description: str | None = None
    is_public: bool | None = None


class ProjectSummary(BaseModel):
    """Project fields exposed by the status endpoint."""

    id: str
    name: str
    subdomain: str
    framework: str | None = None
    status: ProjectStatus
    deployment_url: str | None = None
    github_repo: str | None = None
    custom_domain: str | None = None
    domain_status: DomainStatus | None = None

    @classmethod
    def from_project(cls, project: Project) -> "ProjectSummary":
        return cls(
            id=project.id,
            name=project.name,
            subdomain=project.subdomain,
            framework=project.framework,
            status=project.status,
            deployment_url=project.deployment_url,
            github_repo=project.github_repo,
            custom_domain=project.custom_domain,
            domain_status=project.domain_status,
        )


class ProjectResponse(BaseModel):
    """API response model for a project."""

    project: Project


class ProjectListResponse(BaseModel):
    """Response for listing projects."""

    projects: list[Project]


class GalleryProject(BaseModel):
    """A public, live project with its owner."""

    id: str
    name: str
    description: str | None = None
    framework: str | None = None
    deployment_url: str | None = None
    custom_domain: str | None = None
    subdomain: str
    created_at: datetime
    username: str
    avatar_url: str | None = None

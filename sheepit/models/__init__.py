"""Data models for SheepIt."""

from sheepit.models.deployment import (
    Deployment,
    DeploymentStatus,
    DeploymentSummary,
    map_ready_state,
)
from sheepit.models.files import EnvFileEntry, EnvVar, FileEntry
from sheepit.models.pipeline import (
    DeployRequest,
    DeployResult,
    DomainRequest,
    DomainResult,
    PushRequest,
    PushResult,
    StatusView,
)
from sheepit.models.project import (
    DomainStatus,
    GalleryProject,
    Project,
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectStatus,
    ProjectSummary,
    ProjectUpdate,
)
from sheepit.models.user import TokenSubmit, User, UserCreate, UserResponse

__all__ = [
    # Project models
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "ProjectListResponse",
    "ProjectStatus",
    "ProjectSummary",
    "DomainStatus",
    "GalleryProject",
    # Deployment models
    "Deployment",
    "DeploymentStatus",
    "DeploymentSummary",
    "map_ready_state",
    # File models
    "FileEntry",
    "EnvFileEntry",
    "EnvVar",
    # Phase models
    "PushRequest",
    "PushResult",
    "DeployRequest",
    "DeployResult",
    "DomainRequest",
    "DomainResult",
    "StatusView",
    # User models
    "User",
    "UserCreate",
    "UserResponse",
    "TokenSubmit",
]

"""Deployment data models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from sheepit.utils.ids import generate_id


class DeploymentStatus(str, Enum):
    """Local deployment status vocabulary."""

    QUEUED = "queued"
    BUILDING = "building"
    READY = "ready"
    ERROR = "error"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self not in (DeploymentStatus.QUEUED, DeploymentStatus.BUILDING)


READY_STATE_MAP: dict[str, DeploymentStatus] = {
    "QUEUED": DeploymentStatus.QUEUED,
    "BUILDING": DeploymentStatus.BUILDING,
    "INITIALIZING": DeploymentStatus.BUILDING,
    "READY": DeploymentStatus.READY,
    "ERROR": DeploymentStatus.ERROR,
    "CANCELED": DeploymentStatus.CANCELED,
}


def map_ready_state(ready_state: str | None) -> DeploymentStatus | None:
    """Translate a Vercel ``readyState`` into the local vocabulary."""
    if not isinstance(ready_state, str) or not ready_state:
        return None
    return READY_STATE_MAP.get(ready_state.upper())


class Deployment(BaseModel):
    """One deployment attempt of a project."""

    id: str = Field(default_factory=generate_id)
    project_id: str
    vercel_deployment_id: str | None = None
    status: DeploymentStatus = DeploymentStatus.QUEUED
    url: str | None = None
    error_message: str | None = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class DeploymentSummary(BaseModel):
    """Deployment fields exposed by the status endpoint."""

    id: str
    status: DeploymentStatus
    url: str | None = None
    error_message: str | None = None
    created_at: datetime

    @classmethod
    def from_deployment(cls, deployment: Deployment) -> "DeploymentSummary":
        return cls(
            id=deployment.id,
            status=deployment.status,
            url=deployment.url,
            error_message=deployment.error_message,
            created_at=deployment.created_at,
        )

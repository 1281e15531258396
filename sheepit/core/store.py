"""In-memory storage for users, projects and deployments.

Note: For production, this should be backed by a relational database.
Each ``update_*`` call is one atomic write; reads hand out copies so a
caller never changes stored state without going through the store.
"""

from datetime import datetime
from functools import lru_cache
from typing import Any

from sheepit.core.exceptions import ProjectNotFoundError
from sheepit.models.deployment import Deployment, DeploymentStatus
from sheepit.models.project import GalleryProject, Project, ProjectStatus
from sheepit.models.user import User


class Store:
    """Keyed entity store standing in for the persistent database."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._projects: dict[str, Project] = {}
        self._deployments: dict[str, Deployment] = {}

    # Users

    async def create_user(self, user: User) -> User:
        self._users[user.id] = user
        return user.model_copy()

    async def get_user(self, user_id: str) -> User | None:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def get_user_by_github_id(self, github_id: str) -> User | None:
        for user in self._users.values():
            if user.github_id == github_id:
                return user.model_copy()
        return None

    async def update_user(self, user_id: str, **changes: Any) -> User:
        user = self._users[user_id]
        updated = user.model_copy(update={**changes, "updated_at": datetime.utcnow()})
        self._users[user_id] = updated
        return updated.model_copy()

    # Projects

    async def create_project(self, user_id: str, name: str) -> Project:
        """Create a new project in the ``created`` state."""
        project = Project(user_id=user_id, name=name)
        self._projects[project.id] = project
        return project.model_copy()

    async def get_project(self, project_id: str) -> Project | None:
        project = self._projects.get(project_id)
        return project.model_copy() if project else None

    async def get_project_for_user(self, project_id: str, user_id: str) -> Project | None:
        """Get a project only if it belongs to the given user."""
        project = self._projects.get(project_id)
        if project is None or project.user_id != user_id:
            return None
        return project.model_copy()

    async def list_projects(self, user_id: str) -> list[Project]:
        """List a user's projects, newest first."""
        projects = [p for p in self._projects.values() if p.user_id == user_id]
        projects.sort(key=lambda p: p.created_at, reverse=True)
        return [p.model_copy() for p in projects]

    async def list_public_live_projects(self) -> list[GalleryProject]:
        """Public, live projects joined with their owners."""
        items: list[GalleryProject] = []
        for project in self._projects.values():
            if not project.is_public or project.status != ProjectStatus.LIVE:
                continue
            owner = self._users.get(project.user_id)
            if owner is None:
                continue
            items.append(
                GalleryProject(
                    id=project.id,
                    name=project.name,
                    description=project.description,
                    framework=project.framework,
                    deployment_url=project.deployment_url,
                    custom_domain=project.custom_domain,
                    subdomain=project.subdomain,
                    created_at=project.created_at,
                    username=owner.username,
                    avatar_url=owner.avatar_url,
                )
            )
        items.sort(key=lambda g: g.created_at, reverse=True)
        return items

    async def update_project(self, project_id: str, **changes: Any) -> Project:
        """Apply a partial update to a project."""
        project = self._projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        updated = project.model_copy(update={**changes, "updated_at": datetime.utcnow()})
        self._projects[project_id] = updated
        return updated.model_copy()

    async def delete_project(self, project_id: str) -> bool:
        """Delete a project and its deployments."""
        if project_id not in self._projects:
            return False
        for deployment_id in [
            d.id for d in self._deployments.values() if d.project_id == project_id
        ]:
            del self._deployments[deployment_id]
        del self._projects[project_id]
        return True

    # Deployments

    async def create_deployment(
        self,
        project_id: str,
        vercel_deployment_id: str | None,
        status: DeploymentStatus = DeploymentStatus.QUEUED,
    ) -> Deployment:
        deployment = Deployment(
            project_id=project_id,
            vercel_deployment_id=vercel_deployment_id,
            status=status,
        )
        self._deployments[deployment.id] = deployment
        return deployment.model_copy()

    async def list_deployments(self, project_id: str) -> list[Deployment]:
        """Deployment history of a project, newest first."""
        # Insertion order breaks created_at ties.
        ordered = [
            (index, d)
            for index, d in enumerate(self._deployments.values())
            if d.project_id == project_id
        ]
        ordered.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        return [d.model_copy() for _, d in ordered]

    async def latest_deployment(self, project_id: str) -> Deployment | None:
        """The most recent deployment, which defines the current status."""
        deployments = await self.list_deployments(project_id)
        return deployments[0] if deployments else None

    async def update_deployment(self, deployment_id: str, **changes: Any) -> Deployment:
        deployment = self._deployments[deployment_id]
        updated = deployment.model_copy(
            update={**changes, "updated_at": datetime.utcnow()}
        )
        self._deployments[deployment_id] = updated
        return updated.model_copy()


@lru_cache
def get_store() -> Store:
    """Get the store singleton."""
    return Store()

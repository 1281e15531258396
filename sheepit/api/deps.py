"""Dependency injection for API endpoints."""

from typing import Annotated

from fastapi import Depends, Header

from sheepit.core.exceptions import ProjectNotFoundError, UnauthorizedError
from sheepit.core.orchestrator import DeploymentOrchestrator, get_orchestrator
from sheepit.core.session import SessionContext
from sheepit.core.store import Store, get_store
from sheepit.models.project import Project
from sheepit.models.user import User


async def get_store_dep() -> Store:
    """Get the store."""
    return get_store()


async def get_orchestrator_dep() -> DeploymentOrchestrator:
    """Get the deployment orchestrator."""
    return get_orchestrator()


async def get_current_user(
    store: Annotated[Store, Depends(get_store_dep)],
    x_user_id: Annotated[str | None, Header()] = None,
) -> User:
    """Resolve the caller from the session header or raise 401."""
    if not x_user_id:
        raise UnauthorizedError()
    user = await store.get_user(x_user_id)
    if user is None:
        raise UnauthorizedError()
    return user


async def get_session_context(
    user: Annotated[User, Depends(get_current_user)],
) -> SessionContext:
    return SessionContext(user_id=user.id)


async def get_project_by_id(
    project_id: str,
    ctx: Annotated[SessionContext, Depends(get_session_context)],
    store: Annotated[Store, Depends(get_store_dep)],
) -> Project:
    """Get one of the caller's projects or raise 404."""
    project = await store.get_project_for_user(project_id, ctx.user_id)
    if not project:
        raise ProjectNotFoundError(project_id)
    return project


# Type aliases for cleaner signatures
StoreDep = Annotated[Store, Depends(get_store_dep)]
OrchestratorDep = Annotated[DeploymentOrchestrator, Depends(get_orchestrator_dep)]
UserDep = Annotated[User, Depends(get_current_user)]
SessionDep = Annotated[SessionContext, Depends(get_session_context)]
ProjectDep = Annotated[Project, Depends(get_project_by_id)]

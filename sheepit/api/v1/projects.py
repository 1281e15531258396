"""Project management and deployment pipeline endpoints."""

from fastapi import APIRouter, BackgroundTasks, status

from sheepit.api.deps import OrchestratorDep, ProjectDep, SessionDep, StoreDep
from sheepit.core.exceptions import PreconditionError
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
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from sheepit.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new project",
)
async def create_project(
    request: ProjectCreate,
    ctx: SessionDep,
    store: StoreDep,
) -> ProjectResponse:
    name = request.name.strip()
    if not name:
        raise PreconditionError("Project name is required")

    project = await store.create_project(ctx.user_id, name)
    logger.info("project.created", project_id=project.id, subdomain=project.subdomain)
    return ProjectResponse(project=project)


@router.get("", response_model=ProjectListResponse, summary="List projects")
async def list_projects(ctx: SessionDep, store: StoreDep) -> ProjectListResponse:
    return ProjectListResponse(projects=await store.list_projects(ctx.user_id))


@router.get("/{project_id}", response_model=ProjectResponse, summary="Get project details")
async def get_project(project: ProjectDep) -> ProjectResponse:
    return ProjectResponse(project=project)


@router.patch("/{project_id}", response_model=ProjectResponse, summary="Edit project details")
async def update_project(
    request: ProjectUpdate,
    project: ProjectDep,
    store: StoreDep,
) -> ProjectResponse:
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if changes:
        project = await store.update_project(project.id, **changes)
    return ProjectResponse(project=project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a project",
)
async def delete_project(project: ProjectDep, store: StoreDep) -> None:
    """Delete the local record. Provider resources are left untouched."""
    await store.delete_project(project.id)
    logger.info("project.deleted", project_id=project.id)


@router.post(
    "/{project_id}/push",
    response_model=PushResult,
    summary="Push files to GitHub",
    description="Create or reuse the project's repository and push the files as one commit.",
)
async def push_project(
    request: PushRequest,
    project: ProjectDep,
    ctx: SessionDep,
    orchestrator: OrchestratorDep,
) -> PushResult:
    return await orchestrator.push(ctx, project.id, request)


@router.post(
    "/{project_id}/deploy",
    response_model=DeployResult,
    summary="Deploy to Vercel",
    description="Returns once the deployment is created. Poll the status endpoint for completion.",
)
async def deploy_project(
    request: DeployRequest,
    project: ProjectDep,
    ctx: SessionDep,
    orchestrator: OrchestratorDep,
) -> DeployResult:
    return await orchestrator.deploy(ctx, project.id, request)


@router.get("/{project_id}/status", response_model=StatusView, summary="Get deployment status")
async def get_status(
    project: ProjectDep,
    ctx: SessionDep,
    orchestrator: OrchestratorDep,
    background_tasks: BackgroundTasks,
) -> StatusView:
    return await orchestrator.get_status(ctx, project.id, schedule=background_tasks.add_task)


@router.post("/{project_id}/domain", response_model=DomainResult, summary="Attach a custom domain")
async def set_domain(
    request: DomainRequest,
    project: ProjectDep,
    ctx: SessionDep,
    orchestrator: OrchestratorDep,
) -> DomainResult:
    return await orchestrator.set_domain(ctx, project.id, request)


@router.get("/{project_id}/domain", response_model=DomainResult)
async def get_domain(
    project: ProjectDep,
    ctx: SessionDep,
    orchestrator: OrchestratorDep,
) -> DomainResult:
    return await orchestrator.get_domain(ctx, project.id)

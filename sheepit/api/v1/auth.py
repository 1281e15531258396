"""User registration and provider credential endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from sheepit.api.deps import OrchestratorDep, SessionDep, UserDep
from sheepit.config import settings
from sheepit.models.user import TokenSubmit, UserCreate, UserResponse

router = APIRouter()


class TokenStored(BaseModel):
    success: bool = True


class CloudflareTokenStored(TokenStored):
    zones: int


class GitHubAppStatus(BaseModel):
    """Whether Vercel can read the user's GitHub repositories."""

    installed: bool
    install_url: str


class ZoneItem(BaseModel):
    id: str
    name: str
    status: str


class ZoneListResponse(BaseModel):
    zones: list[ZoneItem]


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user from a GitHub token",
)
async def register_user(request: UserCreate, orchestrator: OrchestratorDep) -> UserResponse:
    """Verify the token against GitHub, then create or refresh the user."""
    user = await orchestrator.register_user(request.github_token)
    return UserResponse.from_user(user)


@router.get("/users/me", response_model=UserResponse)
async def get_me(user: UserDep) -> UserResponse:
    return UserResponse.from_user(user)


@router.post("/auth/vercel/token", response_model=TokenStored)
async def store_vercel_token(
    request: TokenSubmit,
    ctx: SessionDep,
    orchestrator: OrchestratorDep,
) -> TokenStored:
    await orchestrator.connect_vercel(ctx, request.token)
    return TokenStored()


@router.post("/auth/cloudflare/token", response_model=CloudflareTokenStored)
async def store_cloudflare_token(
    request: TokenSubmit,
    ctx: SessionDep,
    orchestrator: OrchestratorDep,
) -> CloudflareTokenStored:
    """Verify the token can read zones and edit DNS before storing it."""
    zone_count = await orchestrator.connect_cloudflare(ctx, request.token)
    return CloudflareTokenStored(zones=zone_count)


@router.get("/auth/vercel/github-status", response_model=GitHubAppStatus)
async def vercel_github_status(
    ctx: SessionDep,
    orchestrator: OrchestratorDep,
) -> GitHubAppStatus:
    return GitHubAppStatus(
        installed=await orchestrator.vercel_github_app_installed(ctx),
        install_url=settings.vercel_github_app_install_url,
    )


@router.get("/cloudflare/zones", response_model=ZoneListResponse)
async def list_zones(ctx: SessionDep, orchestrator: OrchestratorDep) -> ZoneListResponse:
    zones = await orchestrator.list_zones(ctx)
    return ZoneListResponse(
        zones=[ZoneItem(id=z.id, name=z.name, status=z.status) for z in zones]
    )

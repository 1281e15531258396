"""Deployment Orchestrator.

Coordinates GitHub, Vercel and Cloudflare into one resumable pipeline:

1. push   - create or adopt a GitHub repo and push the files as one commit
2. deploy - provision or reuse a Vercel project and trigger a deployment
3. status - reconcile the latest deployment against Vercel on demand
4. domain - attach a custom domain via Vercel and a Cloudflare CNAME

Each persistence step is its own write. A crash between steps leaves
state that the same phase converges forward when called again.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sheepit.config import settings
from sheepit.core.exceptions import (
    InvalidStatusTransitionError,
    PreconditionError,
    ProjectNotFoundError,
    ProviderError,
    SheepItError,
    UnauthorizedError,
)
from sheepit.core.secrets import EncryptedSecret, revealed
from sheepit.core.session import SessionContext
from sheepit.core.store import Store, get_store
from sheepit.ingest.detect import detect_framework, vercel_framework_slug
from sheepit.ingest.env import merge_env_vars
from sheepit.ingest.files import read_package_json, should_ignore
from sheepit.models.deployment import (
    Deployment,
    DeploymentStatus,
    DeploymentSummary,
    map_ready_state,
)
from sheepit.models.pipeline import (
    DeployRequest,
    DeployResult,
    DomainRequest,
    DomainResult,
    PushRequest,
    PushResult,
    StatusView,
)
from sheepit.models.project import DomainStatus, Project, ProjectStatus, ProjectSummary
from sheepit.models.user import User
from sheepit.providers import Providers
from sheepit.providers.cloudflare import Zone
from sheepit.providers.vercel import VercelDeployment
from sheepit.utils.logging import get_logger
from sheepit.utils.og import fetch_og_image

T = TypeVar("T")

# Same signature as starlette's BackgroundTasks.add_task.
Scheduler = Callable[..., Any]

VERCEL_URL_SUFFIX = ".vercel.app"
DEPLOY_REF = "main"

DEPLOYMENT_ERROR_MESSAGES = {
    DeploymentStatus.ERROR: "Deployment failed on Vercel",
    DeploymentStatus.CANCELED: "Deployment was canceled",
}

CLOUDFLARE_TOKEN_HINT = (
    "Invalid token or insufficient permissions. "
    "Ensure the token has Zone:Read and DNS:Edit permissions."
)


def hosting_name(project: Project) -> str:
    """Vercel project name, recovered from the stored deployment URL."""
    if project.deployment_url:
        return project.deployment_url.removeprefix("https://").removesuffix(VERCEL_URL_SUFFIX)
    return settings.default_name(project.subdomain)


class DeploymentOrchestrator:
    """Runs the push, deploy, status and domain phases for one caller."""

    def __init__(
        self,
        store: Store | None = None,
        providers: Providers | None = None,
        encryption_key: str | None = None,
        provision_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        og_fetcher: Callable[[str], Awaitable[str | None]] = fetch_og_image,
    ):
        self.store = store or get_store()
        self.providers = providers or Providers()
        self.encryption_key = (
            encryption_key if encryption_key is not None else settings.encryption_key
        )
        self.provision_delay = (
            provision_delay
            if provision_delay is not None
            else settings.repo_provision_delay_seconds
        )
        self._sleep = sleep
        self._og_fetcher = og_fetcher
        self._background: set[asyncio.Task] = set()
        self.logger = get_logger("orchestrator")

    # Helpers

    async def _call(
        self,
        secret: EncryptedSecret,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Run one provider call with the token opened only for its duration."""
        with revealed(secret, self.encryption_key) as token:
            return await fn(token, *args, **kwargs)

    async def _load_user(self, ctx: SessionContext) -> User:
        user = await self.store.get_user(ctx.user_id)
        if user is None:
            raise UnauthorizedError("User not found")
        return user

    async def _load_project(self, ctx: SessionContext, project_id: str) -> Project:
        project = await self.store.get_project_for_user(project_id, ctx.user_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    async def _set_status(
        self, project: Project, target: ProjectStatus, **changes: Any
    ) -> Project:
        if not project.status.can_transition_to(target):
            raise InvalidStatusTransitionError(project.status.value, target.value)
        if project.status == target and not changes:
            return project
        return await self.store.update_project(project.id, status=target, **changes)

    # Accounts

    async def register_user(self, github_token: str) -> User:
        """Create or refresh a user from a GitHub access token."""
        github_token = github_token.strip()
        gh_user = await self.providers.github.get_user(github_token)
        sealed = EncryptedSecret.seal(github_token, self.encryption_key)

        existing = await self.store.get_user_by_github_id(gh_user.id)
        if existing:
            return await self.store.update_user(
                existing.id,
                github_token=sealed,
                username=gh_user.login,
                email=gh_user.email,
                avatar_url=gh_user.avatar_url,
            )

        user = await self.store.create_user(
            User(
                github_id=gh_user.id,
                username=gh_user.login,
                email=gh_user.email,
                avatar_url=gh_user.avatar_url,
                github_token=sealed,
            )
        )
        self.logger.info("orchestrator.user.registered", user_id=user.id, username=user.username)
        return user

    async def connect_vercel(self, ctx: SessionContext, token: str) -> User:
        """Store a Vercel token for the caller."""
        token = token.strip()
        if not token:
            raise PreconditionError("Token is required")
        await self._load_user(ctx)
        return await self.store.update_user(
            ctx.user_id, vercel_token=EncryptedSecret.seal(token, self.encryption_key)
        )

    async def connect_cloudflare(self, ctx: SessionContext, token: str) -> int:
        """Verify and store a Cloudflare token; returns the visible zone count."""
        token = token.strip()
        if not token:
            raise PreconditionError("Token is required")
        await self._load_user(ctx)

        try:
            await self.providers.cloudflare.verify_token(token)
            zones = await self.providers.cloudflare.list_zones(token)
        except ProviderError as e:
            self.logger.warning(
                "orchestrator.cloudflare.token_rejected",
                user_id=ctx.user_id,
                error=e.message,
            )
            raise PreconditionError(CLOUDFLARE_TOKEN_HINT) from e

        await self.store.update_user(
            ctx.user_id, cloudflare_token=EncryptedSecret.seal(token, self.encryption_key)
        )
        return len(zones)

    async def list_zones(self, ctx: SessionContext) -> list[Zone]:
        user = await self._load_user(ctx)
        if not user.cloudflare_token:
            raise PreconditionError("Cloudflare not connected")
        return await self._call(user.cloudflare_token, self.providers.cloudflare.list_zones)

    async def vercel_github_app_installed(self, ctx: SessionContext) -> bool:
        """Whether the Vercel GitHub App covers the caller's GitHub account.

        Any failure reads as "not installed".
        """
        user = await self._load_user(ctx)
        if not user.vercel_token:
            return False
        try:
            return await self._call(
                user.vercel_token,
                self.providers.vercel.is_github_app_installed,
                user.username,
            )
        except SheepItError as e:
            self.logger.warning("orchestrator.vercel.namespace_check_failed", error=e.message)
            return False

    # Push phase

    async def push(
        self, ctx: SessionContext, project_id: str, request: PushRequest
    ) -> PushResult:
        """Create or adopt the GitHub repo and push the files as one commit."""
        project = await self._load_project(ctx, project_id)
        if not request.files:
            raise PreconditionError("No files provided")

        user = await self._load_user(ctx)
        files = [f for f in request.files if not should_ignore(f.path)]
        if not files:
            raise PreconditionError("No valid files after filtering")

        detection = detect_framework([f.path for f in files], read_package_json(files))

        if not project.github_repo:
            repo_name = (request.repo_name or "").strip() or settings.default_name(
                project.subdomain
            )
            gh_user = await self._call(user.github_token, self.providers.github.get_user)

            is_new_repo = False
            try:
                repo = await self._call(
                    user.github_token, self.providers.github.create_repo, repo_name
                )
                repo_full_name = repo.full_name
                is_new_repo = True
            except ProviderError as e:
                if not e.is_conflict_exists:
                    raise
                repo_full_name = f"{gh_user.login}/{repo_name}"
                self.logger.info(
                    "orchestrator.push.repo_exists",
                    project_id=project.id,
                    repo=repo_full_name,
                )

            # Linked before pushing so a failed push still leaves a usable repo.
            project = await self.store.update_project(
                project.id,
                github_repo=repo_full_name,
                framework=detection.framework,
                build_command=detection.build_command,
                output_directory=detection.output_directory,
            )

            if is_new_repo:
                await self._sleep(self.provision_delay)

        owner, repo_name = project.repo_owner_and_name
        self.logger.info(
            "orchestrator.push.started",
            project_id=project.id,
            repo=project.github_repo,
            file_count=len(files),
        )
        commit_sha = await self._call(
            user.github_token,
            self.providers.github.push_files,
            owner,
            repo_name,
            files,
            settings.commit_message,
        )

        return PushResult(
            github_repo=project.github_repo,
            github_url=f"https://github.com/{project.github_repo}",
            framework=detection.framework,
            file_count=len(files),
            commit_sha=commit_sha,
        )

    # Deploy phase

    async def deploy(
        self, ctx: SessionContext, project_id: str, request: DeployRequest
    ) -> DeployResult:
        """Provision the Vercel project if needed and trigger a deployment.

        Returns as soon as the deployment is created; completion is observed
        through :meth:`get_status`.
        """
        project = await self._load_project(ctx, project_id)
        if not project.github_repo:
            raise PreconditionError("Push to GitHub first")

        user = await self._load_user(ctx)
        if not user.vercel_token:
            raise PreconditionError("Vercel not connected. Please connect Vercel first.")

        owner, repo_name = project.repo_owner_and_name

        if not project.vercel_project_id:
            name = (request.vercel_project_name or "").strip() or settings.default_name(
                project.subdomain
            )
            vercel_project = await self._call(
                user.vercel_token,
                self.providers.vercel.create_project,
                name,
                git_repo=project.github_repo,
                framework=vercel_framework_slug(project.framework),
                build_command=project.build_command,
                output_directory=project.output_directory,
            )
            project = await self.store.update_project(
                project.id,
                vercel_project_id=vercel_project.id,
                deployment_url=f"https://{name}{VERCEL_URL_SUFFIX}",
            )

        if request.env_vars:
            env_vars = merge_env_vars([request.env_vars])
            try:
                await self._call(
                    user.vercel_token,
                    self.providers.vercel.set_env_vars,
                    project.vercel_project_id,
                    env_vars,
                )
            except ProviderError as e:
                # Env vars can be fixed and redeployed; do not block the deploy.
                self.logger.warning(
                    "orchestrator.deploy.env_vars_failed",
                    project_id=project.id,
                    error=e.message,
                )

        vercel_deployment = await self._call(
            user.vercel_token,
            self.providers.vercel.create_deployment,
            hosting_name(project),
            owner,
            repo_name,
            DEPLOY_REF,
        )

        deployment = await self.store.create_deployment(
            project.id, vercel_deployment.id, DeploymentStatus.BUILDING
        )
        await self._set_status(project, ProjectStatus.DEPLOYING)

        self.logger.info(
            "orchestrator.deploy.triggered",
            project_id=project.id,
            deployment_id=deployment.id,
            vercel_deployment_id=vercel_deployment.id,
        )
        return DeployResult(
            deployment_id=deployment.id,
            vercel_deployment_id=vercel_deployment.id,
            status=deployment.status,
        )

    # Status reconciliation

    async def get_status(
        self,
        ctx: SessionContext,
        project_id: str,
        schedule: Scheduler | None = None,
    ) -> StatusView:
        """Current project and latest deployment, refreshed from Vercel if in flight."""
        project = await self._load_project(ctx, project_id)
        latest = await self.store.latest_deployment(project.id)

        if latest and latest.vercel_deployment_id and not latest.status.is_terminal:
            user = await self.store.get_user(ctx.user_id)
            if user and user.vercel_token:
                try:
                    live = await self._call(
                        user.vercel_token,
                        self.providers.vercel.get_deployment,
                        latest.vercel_deployment_id,
                    )
                except SheepItError as e:
                    self.logger.warning(
                        "orchestrator.status.refresh_failed",
                        project_id=project.id,
                        error=e.message,
                    )
                else:
                    new_status = map_ready_state(live.ready_state)
                    if new_status is not None and new_status != latest.status:
                        project, latest = await self._apply_deployment_status(
                            project, latest, new_status, live, schedule
                        )

        return StatusView(
            project=ProjectSummary.from_project(project),
            deployment=DeploymentSummary.from_deployment(latest) if latest else None,
        )

    async def _apply_deployment_status(
        self,
        project: Project,
        deployment: Deployment,
        new_status: DeploymentStatus,
        live: VercelDeployment,
        schedule: Scheduler | None,
    ) -> tuple[Project, Deployment]:
        deployment_url = (
            f"https://{live.url}" if new_status == DeploymentStatus.READY and live.url else None
        )
        deployment = await self.store.update_deployment(
            deployment.id,
            status=new_status,
            url=deployment_url,
            error_message=DEPLOYMENT_ERROR_MESSAGES.get(new_status),
        )

        if new_status == DeploymentStatus.READY:
            project = await self._set_status(
                project,
                ProjectStatus.LIVE,
                deployment_url=project.deployment_url or deployment_url,
            )
            self.logger.info(
                "orchestrator.status.live", project_id=project.id, url=project.deployment_url
            )
            self._schedule_og_image(project, schedule)
        elif new_status in DEPLOYMENT_ERROR_MESSAGES:
            self.logger.warning(
                "orchestrator.status.failed",
                project_id=project.id,
                vercel_deployment_id=deployment.vercel_deployment_id,
                ready_state=live.ready_state,
            )
            project = await self._set_status(project, ProjectStatus.FAILED)

        return project, deployment

    def _schedule_og_image(self, project: Project, schedule: Scheduler | None) -> None:
        if project.og_image:
            return
        if project.custom_domain:
            page_url = f"https://{project.custom_domain}"
        else:
            page_url = project.deployment_url
        if not page_url:
            return

        if schedule is not None:
            schedule(self.refresh_og_image, project.id, page_url)
            return
        task = asyncio.get_running_loop().create_task(
            self.refresh_og_image(project.id, page_url)
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def refresh_og_image(self, project_id: str, page_url: str) -> str | None:
        """Best-effort fetch and cache of a live site's social preview image."""
        image = await self._og_fetcher(page_url)
        if image:
            try:
                await self.store.update_project(project_id, og_image=image)
            except ProjectNotFoundError:
                return None
        return image

    # Domain phase

    async def get_domain(self, ctx: SessionContext, project_id: str) -> DomainResult:
        project = await self._load_project(ctx, project_id)
        return DomainResult(
            custom_domain=project.custom_domain, domain_status=project.domain_status
        )

    async def set_domain(
        self, ctx: SessionContext, project_id: str, request: DomainRequest
    ) -> DomainResult:
        """Attach ``request.full_domain`` via Vercel and a Cloudflare CNAME.

        The target domain is persisted as ``pending`` before any provider
        call and flips to ``error`` (keeping the domain) if any step fails.
        """
        project = await self._load_project(ctx, project_id)
        if not project.vercel_project_id:
            raise PreconditionError("Deploy to Vercel first")

        user = await self._load_user(ctx)
        if not user.cloudflare_token:
            raise PreconditionError("Cloudflare not connected")
        if not user.vercel_token:
            raise PreconditionError("Vercel not connected")

        full_domain = request.full_domain
        await self.store.update_project(
            project.id, custom_domain=full_domain, domain_status=DomainStatus.PENDING
        )

        try:
            await self._call(
                user.vercel_token,
                self.providers.vercel.add_domain,
                project.vercel_project_id,
                full_domain,
            )
            config = await self._call(
                user.vercel_token, self.providers.vercel.get_domain_config, full_domain
            )
            target = config.cname_target()
            await self._call(
                user.cloudflare_token,
                self.providers.cloudflare.create_dns_record,
                request.zone_id,
                full_domain,
                target,
            )
        except Exception as e:
            self.logger.error(
                "orchestrator.domain.failed",
                project_id=project.id,
                domain=full_domain,
                error=str(e),
            )
            await self.store.update_project(project.id, domain_status=DomainStatus.ERROR)
            raise

        await self.store.update_project(project.id, domain_status=DomainStatus.ACTIVE)
        self.logger.info(
            "orchestrator.domain.active", project_id=project.id, domain=full_domain, target=target
        )
        return DomainResult(custom_domain=full_domain, domain_status=DomainStatus.ACTIVE)


# Singleton instance
_orchestrator: DeploymentOrchestrator | None = None


def get_orchestrator() -> DeploymentOrchestrator:
    """Get the orchestrator singleton."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = DeploymentOrchestrator()
    return _orchestrator

"""Pytest configuration and fixtures."""

import base64

import pytest
from httpx import ASGITransport, AsyncClient

from sheepit.api.deps import get_orchestrator_dep, get_store_dep
from sheepit.core.exceptions import ProviderError
from sheepit.core.orchestrator import DeploymentOrchestrator
from sheepit.core.secrets import EncryptedSecret, generate_key
from sheepit.core.session import SessionContext
from sheepit.core.store import Store
from sheepit.main import app
from sheepit.models.files import FileEntry
from sheepit.models.user import User
from sheepit.providers import Providers
from sheepit.providers.cloudflare import CloudflareClient, DnsRecord, Zone
from sheepit.providers.github import GitHubClient, GitHubRepo, GitHubUser
from sheepit.providers.vercel import (
    DomainConfig,
    VercelClient,
    VercelDeployment,
    VercelProject,
)


def b64(text: str) -> str:
    return base64.b64encode(text.encode()).decode()


class FakeGitHub(GitHubClient):
    """Records calls instead of talking to GitHub."""

    def __init__(self) -> None:
        super().__init__(base_url="https://github.test")
        self.login = "octo"
        self.create_repo_error: ProviderError | None = None
        self.push_error: ProviderError | None = None
        self.created_repos: list[str] = []
        self.pushes: list[dict] = []
        self.tokens: list[str] = []

    async def get_user(self, token: str) -> GitHubUser:
        self.tokens.append(token)
        return GitHubUser(id="1001", login=self.login, email="octo@example.com")

    async def create_repo(self, token: str, name: str) -> GitHubRepo:
        self.tokens.append(token)
        if self.create_repo_error:
            raise self.create_repo_error
        self.created_repos.append(name)
        return GitHubRepo(
            full_name=f"{self.login}/{name}",
            default_branch="main",
            html_url=f"https://github.com/{self.login}/{name}",
        )

    async def push_files(self, token, owner, repo, files, message) -> str:
        self.tokens.append(token)
        if self.push_error:
            raise self.push_error
        self.pushes.append(
            {"owner": owner, "repo": repo, "paths": [f.path for f in files], "message": message}
        )
        return f"sha{len(self.pushes)}"


class FakeVercel(VercelClient):
    """Scriptable Vercel double."""

    def __init__(self) -> None:
        super().__init__(base_url="https://vercel.test")
        self.ready_state = "BUILDING"
        self.live_host = "sheepit-site-abc123.vercel.app"
        self.env_error: ProviderError | None = None
        self.get_deployment_error: ProviderError | None = None
        self.add_domain_error: ProviderError | None = None
        self.recommended_cname: list[dict] = [{"rank": 1, "value": "abc.vercel-dns-017.com."}]
        self.namespaces_installed = True
        self.created_projects: list[dict] = []
        self.env_calls: list[list] = []
        self.deployments: list[dict] = []
        self.get_deployment_calls = 0
        self.domains: list[str] = []

    async def create_project(self, token, name, git_repo=None, framework=None,
                             build_command=None, output_directory=None) -> VercelProject:
        self.created_projects.append(
            {"name": name, "git_repo": git_repo, "framework": framework,
             "build_command": build_command, "output_directory": output_directory}
        )
        return VercelProject(id=f"prj_{len(self.created_projects)}", name=name)

    async def set_env_vars(self, token, project_id, env_vars) -> None:
        self.env_calls.append(list(env_vars))
        if self.env_error:
            raise self.env_error

    async def create_deployment(self, token, name, org, repo, ref="main") -> VercelDeployment:
        self.deployments.append({"name": name, "org": org, "repo": repo, "ref": ref})
        return VercelDeployment(id=f"dpl_{len(self.deployments)}", url="", ready_state="QUEUED")

    async def get_deployment(self, token, deployment_id) -> VercelDeployment:
        self.get_deployment_calls += 1
        if self.get_deployment_error:
            raise self.get_deployment_error
        return VercelDeployment(id=deployment_id, url=self.live_host, ready_state=self.ready_state)

    async def add_domain(self, token, project_id, domain) -> dict:
        if self.add_domain_error:
            raise self.add_domain_error
        self.domains.append(domain)
        return {"name": domain}

    async def get_domain_config(self, token, domain) -> DomainConfig:
        return DomainConfig(recommended_cname=self.recommended_cname)

    async def is_github_app_installed(self, token, github_username) -> bool:
        return self.namespaces_installed


class FakeCloudflare(CloudflareClient):
    """Scriptable Cloudflare double."""

    def __init__(self) -> None:
        super().__init__(base_url="https://cloudflare.test")
        self.valid_tokens = {"cf-token"}
        self.zones = [Zone(id="zone1", name="example.com", status="active")]
        self.records: list[dict] = []

    def _check(self, token: str, operation: str) -> None:
        if token not in self.valid_tokens:
            raise ProviderError("Cloudflare", operation, "Invalid API Token", status=401)

    async def verify_token(self, token: str) -> dict:
        self._check(token, "verifyToken")
        return {"status": "active"}

    async def list_zones(self, token: str) -> list[Zone]:
        self._check(token, "listZones")
        return list(self.zones)

    async def create_dns_record(self, token, zone_id, name, content="cname.vercel-dns.com"):
        self._check(token, "createDnsRecord")
        self.records.append({"zone_id": zone_id, "name": name, "content": content})
        return DnsRecord(id="rec1", name=name, type="CNAME", content=content)


@pytest.fixture
def encryption_key() -> str:
    return generate_key()


@pytest.fixture
def store() -> Store:
    """Create a fresh store for tests."""
    return Store()


@pytest.fixture
def providers() -> Providers:
    return Providers(github=FakeGitHub(), vercel=FakeVercel(), cloudflare=FakeCloudflare())


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def og_requests() -> list[str]:
    return []


@pytest.fixture
def orchestrator(
    store: Store,
    providers: Providers,
    encryption_key: str,
    sleeps: list[float],
    og_requests: list[str],
) -> DeploymentOrchestrator:
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    async def fake_og(url: str) -> str | None:
        og_requests.append(url)
        return "https://cdn.example.com/og.png"

    return DeploymentOrchestrator(
        store=store,
        providers=providers,
        encryption_key=encryption_key,
        provision_delay=2.0,
        sleep=fake_sleep,
        og_fetcher=fake_og,
    )


@pytest.fixture
async def user(store: Store, encryption_key: str) -> User:
    """A registered user with GitHub and Vercel connected."""
    return await store.create_user(
        User(
            github_id="1001",
            username="octo",
            github_token=EncryptedSecret.seal("gh-token", encryption_key),
            vercel_token=EncryptedSecret.seal("vc-token", encryption_key),
        )
    )


@pytest.fixture
def ctx(user: User) -> SessionContext:
    return SessionContext(user_id=user.id)


@pytest.fixture
def site_files() -> list[FileEntry]:
    """A small Vite project."""
    return [
        FileEntry(path="index.html", content=b64("<html></html>")),
        FileEntry(
            path="package.json",
            content=b64('{"devDependencies": {"vite": "^5.0.0"}}'),
        ),
        FileEntry(path="src/main.js", content=b64("console.log('hi')")),
        FileEntry(path="vite.config.js", content=b64("export default {}")),
    ]


@pytest.fixture
async def client(store: Store, orchestrator: DeploymentOrchestrator) -> AsyncClient:
    """Create an async test client wired to the test store and fakes."""
    app.dependency_overrides[get_store_dep] = lambda: store
    app.dependency_overrides[get_orchestrator_dep] = lambda: orchestrator

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

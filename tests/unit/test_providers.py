"""Unit tests for provider clients against mocked HTTP."""

import json

import httpx
import pytest

from sheepit.core.exceptions import ProviderError
from sheepit.models.files import EnvVar, FileEntry
from sheepit.providers.cloudflare import CloudflareClient
from sheepit.providers.github import GitHubClient
from sheepit.providers.vercel import FALLBACK_CNAME_TARGET, DomainConfig, VercelClient


class Recorder:
    """MockTransport handler that answers from a route table."""

    def __init__(self, routes: dict[tuple[str, str], tuple[int, object]]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes[(request.method, request.url.path)]
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


def gh_client(routes) -> tuple[GitHubClient, Recorder]:
    recorder = Recorder(routes)
    return GitHubClient(base_url="https://gh.test", transport=httpx.MockTransport(recorder)), recorder


FILES = [
    FileEntry(path="index.html", content="PGh0bWw+"),
    FileEntry(path="src/app.js", content="Ly8gaGk="),
]
REPO = "/repos/octo/site"


class TestGitHubClient:
    @pytest.mark.asyncio
    async def test_push_onto_existing_main(self):
        client, recorder = gh_client(
            {
                ("POST", f"{REPO}/git/blobs"): (201, {"sha": "blob"}),
                ("GET", f"{REPO}/git/ref/heads/main"): (200, {"object": {"sha": "parent"}}),
                ("GET", f"{REPO}/git/commits/parent"): (200, {"tree": {"sha": "basetree"}}),
                ("POST", f"{REPO}/git/trees"): (201, {"sha": "tree"}),
                ("POST", f"{REPO}/git/commits"): (201, {"sha": "commit"}),
                ("PATCH", f"{REPO}/git/refs/heads/main"): (200, {}),
            }
        )

        sha = await client.push_files("tok", "octo", "site", FILES, "Deploy via SheepIt")

        assert sha == "commit"
        assert len(recorder.calls("POST", f"{REPO}/git/blobs")) == 2
        tree_body = json.loads(recorder.calls("POST", f"{REPO}/git/trees")[0].content)
        assert tree_body["base_tree"] == "basetree"
        assert {item["path"] for item in tree_body["tree"]} == {"index.html", "src/app.js"}
        assert all(item["mode"] == "100644" for item in tree_body["tree"])
        commit_body = json.loads(recorder.calls("POST", f"{REPO}/git/commits")[0].content)
        assert commit_body["parents"] == ["parent"]
        assert recorder.requests[0].headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_push_into_empty_repo_creates_ref(self):
        client, recorder = gh_client(
            {
                ("POST", f"{REPO}/git/blobs"): (201, {"sha": "blob"}),
                ("GET", f"{REPO}/git/ref/heads/main"): (409, {}),
                ("POST", f"{REPO}/git/trees"): (201, {"sha": "tree"}),
                ("POST", f"{REPO}/git/commits"): (201, {"sha": "commit"}),
                ("POST", f"{REPO}/git/refs"): (201, {}),
            }
        )

        await client.push_files("tok", "octo", "site", FILES, "msg")

        tree_body = json.loads(recorder.calls("POST", f"{REPO}/git/trees")[0].content)
        assert "base_tree" not in tree_body
        commit_body = json.loads(recorder.calls("POST", f"{REPO}/git/commits")[0].content)
        assert "parents" not in commit_body
        ref_body = json.loads(recorder.calls("POST", f"{REPO}/git/refs")[0].content)
        assert ref_body == {"ref": "refs/heads/main", "sha": "commit"}

    @pytest.mark.asyncio
    async def test_create_repo_conflict(self):
        client, _ = gh_client(
            {
                ("POST", "/user/repos"): (
                    422,
                    {
                        "message": "Repository creation failed.",
                        "errors": [{"message": "name already exists on this account"}],
                    },
                )
            }
        )

        with pytest.raises(ProviderError) as exc_info:
            await client.create_repo("tok", "site")

        assert exc_info.value.status == 422
        assert exc_info.value.is_conflict_exists
        assert "already exists" not in exc_info.value.public_message

    @pytest.mark.asyncio
    async def test_get_user(self):
        client, _ = gh_client(
            {("GET", "/user"): (200, {"id": 7, "login": "octo"})})

        user = await client.get_user("tok")

        assert (user.id, user.login) == ("7", "octo")

    @pytest.mark.asyncio
    async def test_malformed_json(self):
        client, _ = gh_client({("GET", "/user"): (200, "<html>")})

        with pytest.raises(ProviderError, match="malformed JSON"):
            await client.get_user("tok")

    @pytest.mark.asyncio
    async def test_network_error(self):
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        client = GitHubClient(base_url="https://gh.test", transport=httpx.MockTransport(fail))

        with pytest.raises(ProviderError, match="network error"):
            await client.get_user("tok")


class TestVercelClient:
    @pytest.mark.asyncio
    async def test_env_vars_one_request_per_key(self):
        recorder = Recorder({("POST", "/v10/projects/prj/env"): (201, {})})
        client = VercelClient(base_url="https://v.test", transport=httpx.MockTransport(recorder))

        await client.set_env_vars(
            "tok", "prj", [EnvVar(key="A", value="1"), EnvVar(key="B", value="2")]
        )

        bodies = [json.loads(r.content) for r in recorder.requests]
        assert [b["key"] for b in bodies] == ["A", "B"]
        assert all(b["type"] == "encrypted" for b in bodies)
        assert bodies[0]["target"] == ["production", "preview", "development"]

    @pytest.mark.asyncio
    async def test_github_app_installed_matches_slug(self):
        recorder = Recorder(
            {
                ("GET", "/v1/integrations/git-namespaces"): (200, [{"id": 1, "name": "Octo", "slug": "Octo"}])
            }
        )
        client = VercelClient(base_url="https://v.test", transport=httpx.MockTransport(recorder))

        assert await client.is_github_app_installed("tok", "octo") is True
        assert await client.is_github_app_installed("tok", "someone") is False

    @pytest.mark.asyncio
    async def test_create_deployment_uses_git_source(self):
        recorder = Recorder(
            {("POST", "/v13/deployments"): (200, {"id": "dpl", "readyState": "QUEUED"})})
        client = VercelClient(base_url="https://v.test", transport=httpx.MockTransport(recorder))

        deployment = await client.create_deployment("tok", "sheepit-abc", "octo", "site")

        body = json.loads(recorder.requests[0].content)
        assert body["gitSource"] == {"type": "github", "org": "octo", "repo": "site", "ref": "main"}
        assert recorder.requests[0].url.params["skipAutoDetectionConfirmation"] == "1"
        assert deployment.id == "dpl"

    @pytest.mark.asyncio
    async def test_get_deployment_rejects_non_object_body(self):
        recorder = Recorder({("GET", "/v13/deployments/dpl"): (200, ["READY"])})
        client = VercelClient(base_url="https://v.test", transport=httpx.MockTransport(recorder))

        with pytest.raises(ProviderError):
            await client.get_deployment("tok", "dpl")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ready_state", [None, 7, {"state": "READY"}])
    async def test_get_deployment_rejects_non_string_ready_state(self, ready_state):
        recorder = Recorder(
            {("GET", "/v13/deployments/dpl"): (200, {"id": "dpl", "readyState": ready_state})}
        )
        client = VercelClient(base_url="https://v.test", transport=httpx.MockTransport(recorder))

        with pytest.raises(ProviderError):
            await client.get_deployment("tok", "dpl")

    @pytest.mark.asyncio
    async def test_get_deployment_tolerates_null_url(self):
        recorder = Recorder(
            {("GET", "/v13/deployments/dpl"): (200, {"id": None, "url": None, "readyState": "BUILDING"})}
        )
        client = VercelClient(base_url="https://v.test", transport=httpx.MockTransport(recorder))

        deployment = await client.get_deployment("tok", "dpl")

        assert deployment.id == "dpl"
        assert deployment.url == ""
        assert deployment.ready_state == "BUILDING"

    @pytest.mark.asyncio
    async def test_github_app_installed_skips_null_slugs(self):
        recorder = Recorder(
            {
                ("GET", "/v1/integrations/git-namespaces"): (
                    200,
                    [{"id": None, "name": None, "slug": None}, {"id": 2, "name": "Octo", "slug": "octo"}],
                )
            }
        )
        client = VercelClient(base_url="https://v.test", transport=httpx.MockTransport(recorder))

        assert await client.is_github_app_installed("tok", "octo") is True
        assert await client.is_github_app_installed("tok", "someone") is False

    def test_cname_target(self):
        config = DomainConfig(
            recommended_cname=[{"rank": 2, "value": "b."}, {"rank": 1, "value": "a."}]
        )

        assert config.cname_target() == "a."
        assert DomainConfig().cname_target() == FALLBACK_CNAME_TARGET


class TestCloudflareClient:
    @pytest.mark.asyncio
    async def test_unsuccessful_envelope(self):
        recorder = Recorder(
            {("GET", "/user/tokens/verify"): (200, {"success": False, "errors": []})})
        client = CloudflareClient(base_url="https://cf.test", transport=httpx.MockTransport(recorder))

        with pytest.raises(ProviderError):
            await client.verify_token("tok")

    @pytest.mark.asyncio
    async def test_inactive_token(self):
        recorder = Recorder(
            {
                ("GET", "/user/tokens/verify"): (200, {"success": True, "result": {"status": "disabled"}})
            }
        )
        client = CloudflareClient(base_url="https://cf.test", transport=httpx.MockTransport(recorder))

        with pytest.raises(ProviderError, match="not active"):
            await client.verify_token("tok")

    @pytest.mark.asyncio
    async def test_create_dns_record_unproxied(self):
        recorder = Recorder(
            {
                ("POST", "/zones/z1/dns_records"): (200, {"success": True, "result": {"id": "rec", "name": "www.example.com"}})
            }
        )
        client = CloudflareClient(base_url="https://cf.test", transport=httpx.MockTransport(recorder))

        record = await client.create_dns_record("tok", "z1", "www.example.com", "a.vercel-dns.com")

        body = json.loads(recorder.requests[0].content)
        assert body == {
            "type": "CNAME",
            "name": "www.example.com",
            "content": "a.vercel-dns.com",
            "proxied": False,
            "ttl": 1,
        }
        assert record.id == "rec"

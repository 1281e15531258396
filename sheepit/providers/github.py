"""GitHub REST and Git Data API client."""

import asyncio
from dataclasses import dataclass

import httpx

from sheepit.config import settings
from sheepit.models.files import FileEntry
from sheepit.providers.base import ProviderClient
from sheepit.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BRANCH = "main"


@dataclass(frozen=True)
class GitHubUser:
    id: str
    login: str
    email: str | None = None
    avatar_url: str | None = None


@dataclass(frozen=True)
class GitHubRepo:
    full_name: str
    default_branch: str
    html_url: str


class GitHubClient(ProviderClient):
    """GitHub client: identity, repository creation and single-commit pushes."""

    provider = "GitHub"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(base_url or settings.github_api_url, timeout, transport)

    def _headers(self, token: str) -> dict[str, str]:
        return {
            **super()._headers(token),
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "SheepIt",
        }

    async def get_user(self, token: str) -> GitHubUser:
        """Get the authenticated user."""
        data = await self._request(token, "GET", "/user", "getUser")
        return GitHubUser(
            id=str(self._field(data, "id", "getUser")),
            login=self._field(data, "login", "getUser"),
            email=data.get("email"),
            avatar_url=data.get("avatar_url"),
        )

    async def create_repo(self, token: str, name: str) -> GitHubRepo:
        """Create a private repository with an initial commit."""
        data = await self._request(
            token,
            "POST",
            "/user/repos",
            "createRepo",
            json={"name": name, "private": True, "auto_init": True},
        )
        return GitHubRepo(
            full_name=self._field(data, "full_name", "createRepo"),
            default_branch=data.get("default_branch", DEFAULT_BRANCH),
            html_url=data.get("html_url", ""),
        )

    async def _create_blob(
        self,
        client: httpx.AsyncClient,
        token: str,
        repo_path: str,
        entry: FileEntry,
    ) -> dict[str, str]:
        data = await self._request(
            token,
            "POST",
            f"{repo_path}/git/blobs",
            "createBlob",
            json={"content": entry.content, "encoding": "base64"},
            client=client,
        )
        return {
            "path": entry.path,
            "mode": "100644",
            "type": "blob",
            "sha": self._field(data, "sha", "createBlob"),
        }

    async def _resolve_head(
        self, client: httpx.AsyncClient, token: str, repo_path: str
    ) -> tuple[str | None, str | None]:
        """Return ``(commit_sha, tree_sha)`` of ``main``, or Nones for an empty repo."""
        operation = "getRef"
        response = await self._send(
            client, token, "GET", f"{repo_path}/git/ref/heads/{DEFAULT_BRANCH}", operation
        )
        # 404 / 409 mean the repository has no commits yet.
        if response.status_code in (404, 409):
            return None, None
        ref = self._parse(response, operation)
        parent_sha = self._field(self._field(ref, "object", operation), "sha", operation)

        commit = await self._request(
            token, "GET", f"{repo_path}/git/commits/{parent_sha}", "getCommit", client=client
        )
        tree_sha = self._field(self._field(commit, "tree", "getCommit"), "sha", "getCommit")
        return parent_sha, tree_sha

    async def push_files(
        self,
        token: str,
        owner: str,
        repo: str,
        files: list[FileEntry],
        message: str,
    ) -> str:
        """Push a batch of files to ``main`` as one commit.

        Blobs are created concurrently; tree, commit and ref updates run in
        sequence because each needs the previous step's sha. An existing
        ``main`` is moved to the new commit, replacing rather than merging.

        Returns the new commit sha.
        """
        repo_path = f"/repos/{owner}/{repo}"

        async with self._session() as client:
            tree_items = await asyncio.gather(
                *(self._create_blob(client, token, repo_path, entry) for entry in files)
            )

            parent_sha, base_tree_sha = await self._resolve_head(client, token, repo_path)

            tree_payload: dict[str, object] = {"tree": list(tree_items)}
            if base_tree_sha:
                tree_payload["base_tree"] = base_tree_sha
            tree = await self._request(
                token, "POST", f"{repo_path}/git/trees", "createTree",
                json=tree_payload, client=client,
            )

            commit_payload: dict[str, object] = {
                "message": message,
                "tree": self._field(tree, "sha", "createTree"),
            }
            if parent_sha:
                commit_payload["parents"] = [parent_sha]
            commit = await self._request(
                token, "POST", f"{repo_path}/git/commits", "createCommit",
                json=commit_payload, client=client,
            )
            commit_sha = self._field(commit, "sha", "createCommit")

            if parent_sha:
                await self._request(
                    token, "PATCH", f"{repo_path}/git/refs/heads/{DEFAULT_BRANCH}", "updateRef",
                    json={"sha": commit_sha}, client=client,
                )
            else:
                await self._request(
                    token, "POST", f"{repo_path}/git/refs", "createRef",
                    json={"ref": f"refs/heads/{DEFAULT_BRANCH}", "sha": commit_sha},
                    client=client,
                )

        logger.info(
            "github.push.completed",
            repo=f"{owner}/{repo}",
            file_count=len(files),
            commit_sha=commit_sha,
        )
        return commit_sha

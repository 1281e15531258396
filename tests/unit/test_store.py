"""Unit tests for the in-memory store."""

import pytest

from sheepit.core.exceptions import ProjectNotFoundError
from sheepit.core.store import Store
from sheepit.models.deployment import DeploymentStatus
from sheepit.models.project import ProjectStatus
from sheepit.models.user import User


class TestProjects:
    @pytest.mark.asyncio
    async def test_create_project(self, store: Store, user: User):
        project = await store.create_project(user.id, "My Site")

        assert project.status == ProjectStatus.CREATED
        assert len(project.subdomain) == 8
        assert project.subdomain.isalnum() and project.subdomain == project.subdomain.lower()
        assert project.is_public is True

    @pytest.mark.asyncio
    async def test_reads_are_copies(self, store: Store, user: User):
        project = await store.create_project(user.id, "site")
        project.name = "mutated"

        stored = await store.get_project(project.id)
        assert stored.name == "site"

    @pytest.mark.asyncio
    async def test_ownership(self, store: Store, user: User):
        project = await store.create_project(user.id, "site")

        assert await store.get_project_for_user(project.id, user.id) is not None
        assert await store.get_project_for_user(project.id, "someone-else") is None

    @pytest.mark.asyncio
    async def test_update_bumps_updated_at(self, store: Store, user: User):
        project = await store.create_project(user.id, "site")

        updated = await store.update_project(project.id, github_repo="octo/site")

        assert updated.github_repo == "octo/site"
        assert updated.updated_at >= project.updated_at

    @pytest.mark.asyncio
    async def test_update_missing_project(self, store: Store):
        with pytest.raises(ProjectNotFoundError):
            await store.update_project("missing", name="x")

    @pytest.mark.asyncio
    async def test_delete_cascades_deployments(self, store: Store, user: User):
        project = await store.create_project(user.id, "site")
        await store.create_deployment(project.id, "dpl_1")

        assert await store.delete_project(project.id) is True
        assert await store.list_deployments(project.id) == []
        assert await store.delete_project(project.id) is False

    @pytest.mark.asyncio
    async def test_gallery_lists_public_live_projects(self, store: Store, user: User):
        live = await store.create_project(user.id, "live")
        await store.update_project(live.id, status=ProjectStatus.LIVE)
        hidden = await store.create_project(user.id, "hidden")
        await store.update_project(hidden.id, status=ProjectStatus.LIVE, is_public=False)
        await store.create_project(user.id, "draft")

        gallery = await store.list_public_live_projects()

        assert [g.name for g in gallery] == ["live"]
        assert gallery[0].username == "octo"


class TestDeployments:
    @pytest.mark.asyncio
    async def test_latest_deployment_is_most_recent(self, store: Store, user: User):
        project = await store.create_project(user.id, "site")
        await store.create_deployment(project.id, "dpl_1", DeploymentStatus.ERROR)
        second = await store.create_deployment(project.id, "dpl_2", DeploymentStatus.BUILDING)

        latest = await store.latest_deployment(project.id)

        assert latest.id == second.id

    @pytest.mark.asyncio
    async def test_no_deployments(self, store: Store, user: User):
        project = await store.create_project(user.id, "site")

        assert await store.latest_deployment(project.id) is None


class TestUsers:
    @pytest.mark.asyncio
    async def test_lookup_by_github_id(self, store: Store, user: User):
        found = await store.get_user_by_github_id("1001")

        assert found.id == user.id
        assert await store.get_user_by_github_id("9999") is None

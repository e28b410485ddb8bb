"""Tests for RepositoryBootstrapper."""

import pytest

from publisher.bootstrap import RepositoryBootstrapper
from publisher.errors import (
    InvalidCommitRequest,
    RefNotFound,
    RepositoryBootstrapFailed,
    RepositoryCreateFailed,
)
from publisher.gateways.factory import create_gateway
from publisher.models.types import CommitRequest, FileEntry, Provider, RepositoryMode, RepositoryRef
from publisher.orchestrator import CommitOrchestrator
from tests.fixtures.fake_providers import (
    BITBUCKET_BASE_URL,
    GITHUB_BASE_URL,
    GITLAB_BASE_URL,
    FakeBitbucket,
    FakeGitHub,
    FakeGitLab,
    bitbucket_credential,
    github_credential,
    gitlab_credential,
)


def _github_gateway(fake):
    return create_gateway(github_credential(), base_url=GITHUB_BASE_URL, transport=fake.transport)


def _bitbucket_gateway(fake):
    return create_gateway(
        bitbucket_credential(), base_url=BITBUCKET_BASE_URL, transport=fake.transport
    )


class TestCreateNew:
    """Test repository creation followed by seeding."""

    @pytest.mark.asyncio
    async def test_new_github_repository_is_seeded(self):
        fake = FakeGitHub(head_sha=None)
        bootstrapper = RepositoryBootstrapper(_github_gateway(fake))

        repo = await bootstrapper.ensure_repository("demo", RepositoryMode.CREATE_NEW)

        assert repo.full_name == "octo/demo"
        assert fake.calls == [
            ("POST", "/user/repos"),
            ("GET", "/repos/octo/demo/contents/README.md"),
            ("PUT", "/repos/octo/demo/contents/README.md"),
        ]
        assert "README.md" in fake.files

    @pytest.mark.asyncio
    async def test_new_gitlab_repository_is_seeded(self):
        fake = FakeGitLab()
        bootstrapper = RepositoryBootstrapper(
            create_gateway(gitlab_credential(), base_url=GITLAB_BASE_URL, transport=fake.transport)
        )

        repo = await bootstrapper.ensure_repository("demo", RepositoryMode.CREATE_NEW)

        assert repo.full_name == "group/demo"
        assert fake.created_files[0]["content"] == "# demo"

    @pytest.mark.asyncio
    async def test_bitbucket_uses_first_workspace(self):
        fake = FakeBitbucket(workspaces=["team", "other"])
        bootstrapper = RepositoryBootstrapper(_bitbucket_gateway(fake))

        repo = await bootstrapper.ensure_repository("demo", RepositoryMode.CREATE_NEW)

        assert repo.full_name == "team/demo"
        assert fake.calls[:2] == [
            ("GET", "/workspaces"),
            ("POST", "/repositories/team/demo"),
        ]
        assert len(fake.uploads) == 1

    @pytest.mark.asyncio
    async def test_workspace_choice_is_remembered(self):
        fake = FakeBitbucket()
        bootstrapper = RepositoryBootstrapper(_bitbucket_gateway(fake))

        assert await bootstrapper.select_workspace() == "team"
        assert await bootstrapper.select_workspace() == "team"
        assert fake.calls.count(("GET", "/workspaces")) == 1

    @pytest.mark.asyncio
    async def test_no_workspace_fails_creation(self):
        fake = FakeBitbucket(workspaces=[])
        bootstrapper = RepositoryBootstrapper(_bitbucket_gateway(fake))

        with pytest.raises(RepositoryCreateFailed):
            await bootstrapper.ensure_repository("demo", RepositoryMode.CREATE_NEW)

        assert fake.mutating_calls() == []

    @pytest.mark.asyncio
    async def test_rejected_creation(self):
        fake = FakeGitHub()
        fake.fail("POST", "/user/repos", status=422, body={"message": "name already exists on this account"})
        bootstrapper = RepositoryBootstrapper(_github_gateway(fake))

        with pytest.raises(RepositoryCreateFailed) as exc_info:
            await bootstrapper.ensure_repository("demo", RepositoryMode.CREATE_NEW)

        assert "name already exists" in str(exc_info.value)


class TestUseExisting:
    """Test existing repositories."""

    @pytest.mark.asyncio
    async def test_repository_with_readme_is_left_alone(self):
        fake = FakeGitHub(head_sha="AAA", files={"README.md"})
        bootstrapper = RepositoryBootstrapper(_github_gateway(fake))

        repo = await bootstrapper.ensure_repository("octo/demo", RepositoryMode.USE_EXISTING)

        assert repo.full_name == "octo/demo"
        assert fake.mutating_calls() == []

    @pytest.mark.asyncio
    async def test_name_without_owner_is_rejected(self):
        fake = FakeGitHub()
        bootstrapper = RepositoryBootstrapper(_github_gateway(fake))

        with pytest.raises(InvalidCommitRequest):
            await bootstrapper.ensure_repository("demo", RepositoryMode.USE_EXISTING)

        assert fake.calls == []

    @pytest.mark.asyncio
    async def test_seed_failure(self):
        fake = FakeGitHub(head_sha=None)
        fake.fail("PUT", "/repos/octo/demo/contents/README.md", status=403, body={"message": "Forbidden"})
        bootstrapper = RepositoryBootstrapper(_github_gateway(fake))

        with pytest.raises(RepositoryBootstrapFailed) as exc_info:
            await bootstrapper.ensure_repository("octo/demo", RepositoryMode.USE_EXISTING)

        assert "Forbidden" in str(exc_info.value)


class TestBootstrapBeforeCommit:
    """An empty repository only accepts the git object commit after seeding."""

    @staticmethod
    def _request(repo):
        return CommitRequest(
            repository=repo,
            message="Create Pipeline Config",
            files=[FileEntry("/w/collection.json", "collection.json", b"{}")],
        )

    @pytest.mark.asyncio
    async def test_commit_to_empty_repository_fails(self):
        fake = FakeGitHub(head_sha=None)
        repo = RepositoryRef(provider=Provider.GITHUB, full_name="octo/demo")

        with pytest.raises(RefNotFound):
            await CommitOrchestrator(_github_gateway(fake)).publish(self._request(repo))

        assert fake.mutating_calls() == []

    @pytest.mark.asyncio
    async def test_commit_after_seeding_succeeds(self):
        fake = FakeGitHub(head_sha=None)
        gateway = _github_gateway(fake)

        repo = await RepositoryBootstrapper(gateway).ensure_repository(
            "octo/demo", RepositoryMode.USE_EXISTING
        )
        result = await CommitOrchestrator(gateway).publish(self._request(repo))

        assert result.committed is True
        assert fake.commit_requests[0]["parents"] == ["INIT"]
        assert fake.tree_requests[0]["base_tree"] == "T0"
        assert fake.refs["main"] == "BBB"

"""Tests for PublishService end to end against in-memory providers."""

import pytest
from unittest.mock import patch

from common.config import config
from publisher.errors import AuthenticationMissing, FileNotFoundLocally, InvalidCommitRequest
from publisher.gateways.bitbucket import BitbucketGateway
from publisher.gateways.factory import create_gateway
from publisher.models.types import FileAction, Provider, RepositoryMode
from publisher.publish_service import PublishService
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

GITHUB_FILES = [
    ".github/workflows/postman-tests.yml",
    "collection.json",
    "package.json",
    "package-lock.json",
]


class TestGitHubPublish:
    """Test the full GitHub flow: bootstrap, commit, verify."""

    @pytest.mark.asyncio
    async def test_publish_to_existing_repository(self, pipeline_workdir, recording_sleep):
        fake = FakeGitHub(workflow_counts=[0, 1])
        service = PublishService(
            create_gateway(github_credential(), base_url=GITHUB_BASE_URL, transport=fake.transport),
            sleep=recording_sleep,
        )

        report = await service.publish("octo/demo", RepositoryMode.USE_EXISTING, GITHUB_FILES)

        assert report.repository.full_name == "octo/demo"
        assert report.commit.remote_commit_id == "BBB"
        assert report.verification.found is True
        assert report.verification.attempts_used == 2
        # settle wait, then one wait between the two polls
        assert recording_sleep.delays == [10, 10]
        assert [item["path"] for item in fake.tree_requests[0]["tree"]] == GITHUB_FILES
        assert fake.commit_requests[0]["message"] == "Create Pipeline Config"

    @pytest.mark.asyncio
    async def test_publish_to_new_empty_repository(self, pipeline_workdir, recording_sleep):
        fake = FakeGitHub(head_sha=None, workflow_counts=[1])
        service = PublishService(
            create_gateway(github_credential(), base_url=GITHUB_BASE_URL, transport=fake.transport),
            sleep=recording_sleep,
        )

        report = await service.publish(
            "demo", RepositoryMode.CREATE_NEW, GITHUB_FILES, message="Add Postman pipeline"
        )

        assert fake.mutating_calls() == [
            ("POST", "/user/repos"),
            ("PUT", "/repos/octo/demo/contents/README.md"),
            ("POST", "/repos/octo/demo/git/trees"),
            ("POST", "/repos/octo/demo/git/commits"),
            ("PATCH", "/repos/octo/demo/git/refs/heads/main"),
        ]
        assert fake.commit_requests[0] == {
            "message": "Add Postman pipeline",
            "tree": "T2",
            "parents": ["INIT"],
        }
        assert report.verification.found is True

    @pytest.mark.asyncio
    async def test_verification_can_be_skipped(self, pipeline_workdir, recording_sleep):
        fake = FakeGitHub()
        service = PublishService(
            create_gateway(github_credential(), base_url=GITHUB_BASE_URL, transport=fake.transport),
            sleep=recording_sleep,
        )

        report = await service.publish(
            "octo/demo", RepositoryMode.USE_EXISTING, GITHUB_FILES, verify=False
        )

        assert report.verification is None
        assert recording_sleep.delays == []
        assert ("GET", "/repos/octo/demo/actions/workflows") not in fake.calls

    @pytest.mark.asyncio
    async def test_unregistered_workflow_is_reported(self, pipeline_workdir, recording_sleep):
        fake = FakeGitHub(workflow_counts=[0])
        service = PublishService(
            create_gateway(github_credential(), base_url=GITHUB_BASE_URL, transport=fake.transport),
            sleep=recording_sleep,
        )

        report = await service.publish("octo/demo", RepositoryMode.USE_EXISTING, GITHUB_FILES)

        assert report.commit.committed is True
        assert report.verification.found is False
        assert report.verification.attempts_used == 3


class TestLocalValidation:
    """Local problems surface before any network call."""

    @pytest.mark.asyncio
    async def test_duplicate_paths(self, pipeline_workdir, recording_sleep):
        fake = FakeGitHub()
        service = PublishService(
            create_gateway(github_credential(), base_url=GITHUB_BASE_URL, transport=fake.transport),
            sleep=recording_sleep,
        )

        with pytest.raises(InvalidCommitRequest):
            await service.publish(
                "octo/demo",
                RepositoryMode.USE_EXISTING,
                ["collection.json", str(pipeline_workdir / "collection.json")],
            )

        assert fake.calls == []

    @pytest.mark.asyncio
    async def test_empty_message_fails_before_repository_is_created(
        self, pipeline_workdir, recording_sleep
    ):
        fake = FakeGitHub(head_sha=None)
        service = PublishService(
            create_gateway(github_credential(), base_url=GITHUB_BASE_URL, transport=fake.transport),
            sleep=recording_sleep,
        )

        with pytest.raises(InvalidCommitRequest):
            await service.publish(
                "fresh", RepositoryMode.CREATE_NEW, ["collection.json"], message=""
            )

        assert fake.mutating_calls() == []
        assert fake.calls == []

    @pytest.mark.asyncio
    async def test_missing_local_file(self, pipeline_workdir, recording_sleep):
        fake = FakeGitHub()
        service = PublishService(
            create_gateway(github_credential(), base_url=GITHUB_BASE_URL, transport=fake.transport),
            sleep=recording_sleep,
        )

        with pytest.raises(FileNotFoundLocally):
            await service.publish("octo/demo", RepositoryMode.USE_EXISTING, ["environment.json"])

        assert fake.calls == []


class TestOtherProviders:
    @pytest.mark.asyncio
    async def test_gitlab_publish_has_no_verification(self, pipeline_workdir, recording_sleep):
        (pipeline_workdir / ".gitlab-ci.yml").write_text("stages: [test]\n")
        fake = FakeGitLab(files={"README.md", ".gitlab-ci.yml"})
        service = PublishService(
            create_gateway(gitlab_credential(), base_url=GITLAB_BASE_URL, transport=fake.transport),
            sleep=recording_sleep,
        )

        report = await service.publish(
            "group/demo", RepositoryMode.USE_EXISTING, [".gitlab-ci.yml", "collection.json"]
        )

        assert service.verifier is None
        assert report.verification is None
        assert report.commit.per_file_action == {
            ".gitlab-ci.yml": FileAction.UPDATE,
            "collection.json": FileAction.CREATE,
        }
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_bitbucket_create_and_publish(self, pipeline_workdir, recording_sleep):
        (pipeline_workdir / "bitbucket-pipelines.yml").write_text("pipelines: {}\n")
        fake = FakeBitbucket()
        service = PublishService(
            create_gateway(bitbucket_credential(), base_url=BITBUCKET_BASE_URL, transport=fake.transport),
            sleep=recording_sleep,
        )

        report = await service.publish(
            "demo", RepositoryMode.CREATE_NEW, ["bitbucket-pipelines.yml", "collection.json"]
        )

        assert isinstance(service.gateway, BitbucketGateway)
        assert report.repository.full_name == "team/demo"
        assert report.commit.committed is True
        assert len(fake.uploads) == 2
        assert fake.pipelines_enabled is True


class TestForProvider:
    def test_missing_token(self):
        with patch.object(config, "GITHUB_TOKEN", None):
            with pytest.raises(AuthenticationMissing):
                PublishService.for_provider(Provider.GITHUB)

    def test_explicit_token(self):
        service = PublishService.for_provider(Provider.GITLAB, token="gl-token")

        assert service.gateway.client.credential.secret == "gl-token"
        assert service.verifier is None

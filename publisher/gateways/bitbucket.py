"""
Bitbucket Cloud gateway built on the 2.0 src upload API.
"""

import logging
from typing import List, Optional, Sequence

from common.config.config import BITBUCKET_PIPELINE_PATH, INITIAL_COMMIT_MESSAGE
from publisher.api.client import BitbucketAPIClient
from publisher.errors import RefNotFound, RemoteRequestError
from publisher.gateways.base import (
    MultipartCommitGateway,
    RemoteRepositoryGateway,
    WorkspaceScopedGateway,
)
from publisher.models.payloads import BitbucketBranch, BitbucketRepository, BitbucketWorkspacePage
from publisher.models.types import FileEntry, HeadCommit, Provider, RepositoryRef

logger = logging.getLogger(__name__)

FILE_CONTENT_TYPE = "application/octet-stream"


class BitbucketGateway(RemoteRepositoryGateway, MultipartCommitGateway, WorkspaceScopedGateway):
    """Bitbucket operations: workspaces, repositories, pipelines and src uploads."""

    provider = Provider.BITBUCKET
    pipeline_config_path = BITBUCKET_PIPELINE_PATH

    def __init__(self, client: BitbucketAPIClient):
        super().__init__(client)

    async def list_workspaces(self) -> List[str]:
        response = await self.client.get("workspaces")
        page = self.decode(BitbucketWorkspacePage, response, "GET", self.client.url_for("workspaces"))
        return [workspace.slug for workspace in page.values]

    async def create_repository(self, name: str, workspace: Optional[str] = None) -> str:
        """Create a public git repository inside a workspace.

        Args:
            name: Repository slug
            workspace: Workspace slug (required)

        Returns:
            Full name of the created repository
        """
        if not workspace:
            raise ValueError("Bitbucket repositories must be created inside a workspace")

        logger.info(f"Creating Bitbucket repository {name} in workspace {workspace}")
        path = f"repositories/{workspace}/{name}"
        response = await self.client.post(path, data={"scm": "git", "is_private": False})
        repository = self.decode(BitbucketRepository, response, "POST", self.client.url_for(path))
        logger.info(f"Bitbucket repository created successfully: {repository.full_name}")
        return repository.full_name

    async def file_exists(self, repo: RepositoryRef, branch: str, path: str) -> bool:
        return await self.client.exists(f"repositories/{repo.full_name}/src/{branch}/{path}")

    async def seed_readme(self, repo: RepositoryRef, branch: str, path: str, content: str) -> None:
        await self.client.post_multipart(
            f"repositories/{repo.full_name}/src",
            form={"message": INITIAL_COMMIT_MESSAGE, "branch": branch},
            files=[(path, (path, content.encode("utf-8"), FILE_CONTENT_TYPE))],
        )
        logger.info(f"Bitbucket repository {repo.full_name} initialized with {path}")

    async def get_head_commit(self, repo: RepositoryRef, branch: str) -> HeadCommit:
        path = f"repositories/{repo.full_name}/refs/branches/{branch}"
        try:
            response = await self.client.get(path)
        except RemoteRequestError as e:
            if e.status_code == 404:
                raise RefNotFound(e.method, e.url, e.status_code, e.provider_message) from e
            raise
        branch_data = self.decode(BitbucketBranch, response, "GET", self.client.url_for(path))
        return HeadCommit(commit_id=branch_data.target.hash)

    async def enable_pipelines(self, repo: RepositoryRef) -> None:
        await self.client.put(
            f"repositories/{repo.full_name}/pipelines_config", data={"enabled": True}
        )
        logger.info(f"Enabled Bitbucket pipelines for {repo.full_name}")

    async def multipart_publish(
        self,
        repo: RepositoryRef,
        branch: str,
        message: str,
        parent_commit_id: str,
        files: Sequence[FileEntry],
    ) -> None:
        parts = [
            (entry.repo_relative_path, (entry.repo_relative_path, entry.content, FILE_CONTENT_TYPE))
            for entry in files
        ]
        await self.client.post_multipart(
            f"repositories/{repo.full_name}/src",
            form={"message": message, "branch": branch, "parents": parent_commit_id},
            files=parts,
        )
        logger.info(f"Commit successfully created on {repo.full_name}/{branch}")

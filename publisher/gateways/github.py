"""
GitHub gateway built on the Git database API.
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Sequence

from common.config.config import GITHUB_PIPELINE_PATH, INITIAL_COMMIT_MESSAGE
from publisher.api.client import GitHubAPIClient
from publisher.errors import RefNotFound, RemoteRequestError
from publisher.gateways.base import (
    GitObjectGateway,
    RemoteRepositoryGateway,
    WorkflowRegistrationGateway,
)
from publisher.models.payloads import (
    GitHubCommit,
    GitHubRef,
    GitHubRepository,
    GitHubWorkflowList,
    ShaObject,
)
from publisher.models.types import FileEntry, HeadCommit, Provider, RepositoryRef

logger = logging.getLogger(__name__)

BLOB_MODE = "100644"


class GitHubGateway(RemoteRepositoryGateway, GitObjectGateway, WorkflowRegistrationGateway):
    """GitHub operations: repositories, contents, git objects and workflows."""

    provider = Provider.GITHUB
    pipeline_config_path = GITHUB_PIPELINE_PATH

    def __init__(self, client: GitHubAPIClient):
        super().__init__(client)

    async def create_repository(self, name: str, workspace: Optional[str] = None) -> str:
        """Create a public repository owned by the authenticated user.

        GitHub repositories are not workspace-scoped, so `workspace` is ignored.

        Returns:
            Full name of the created repository
        """
        path = "user/repos"
        response = await self.client.post(path, data={"name": name, "private": False})
        repository = self.decode(GitHubRepository, response, "POST", self.client.url_for(path))
        logger.info(f"GitHub repository created successfully: {repository.full_name}")
        return repository.full_name

    async def file_exists(self, repo: RepositoryRef, branch: str, path: str) -> bool:
        return await self.client.exists(
            f"repos/{repo.full_name}/contents/{path}", params={"ref": branch}
        )

    async def seed_readme(self, repo: RepositoryRef, branch: str, path: str, content: str) -> None:
        """Create the README through the contents API, which works on empty repositories."""
        await self.client.put(
            f"repos/{repo.full_name}/contents/{path}",
            data={
                "message": INITIAL_COMMIT_MESSAGE,
                "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
                "branch": branch,
            },
        )
        logger.info(f"Repository {repo.full_name} initialized with {path}")

    async def get_head_commit(self, repo: RepositoryRef, branch: str) -> HeadCommit:
        path = f"repos/{repo.full_name}/git/ref/heads/{branch}"
        try:
            response = await self.client.get(path)
        except RemoteRequestError as e:
            # 409 is returned for repositories without any commit
            if e.status_code in (404, 409):
                raise RefNotFound(e.method, e.url, e.status_code, e.provider_message) from e
            raise
        ref = self.decode(GitHubRef, response, "GET", self.client.url_for(path))
        return HeadCommit(commit_id=ref.object.sha)

    async def get_tree(self, repo: RepositoryRef, head: HeadCommit) -> str:
        if head.tree_id:
            return head.tree_id
        path = f"repos/{repo.full_name}/git/commits/{head.commit_id}"
        response = await self.client.get(path)
        commit = self.decode(GitHubCommit, response, "GET", self.client.url_for(path))
        return commit.tree.sha

    async def write_tree(
        self, repo: RepositoryRef, base_tree_id: str, files: Sequence[FileEntry]
    ) -> str:
        """Create a tree on top of the base tree.

        Text content is embedded in the tree request. Content that is not valid
        UTF-8 cannot be embedded, so it is uploaded as a blob and referenced by sha.
        """
        tree: List[Dict[str, Any]] = []
        for entry in files:
            item: Dict[str, Any] = {
                "path": entry.repo_relative_path,
                "mode": BLOB_MODE,
                "type": "blob",
            }
            text = entry.text()
            if text is None:
                item["sha"] = await self._create_blob(repo, entry.content)
            else:
                item["content"] = text
            tree.append(item)

        path = f"repos/{repo.full_name}/git/trees"
        response = await self.client.post(path, data={"base_tree": base_tree_id, "tree": tree})
        created = self.decode(ShaObject, response, "POST", self.client.url_for(path))
        logger.info(f"Created tree {created.sha} on base {base_tree_id} ({len(tree)} files)")
        return created.sha

    async def _create_blob(self, repo: RepositoryRef, content: bytes) -> str:
        path = f"repos/{repo.full_name}/git/blobs"
        response = await self.client.post(
            path,
            data={"content": base64.b64encode(content).decode("ascii"), "encoding": "base64"},
        )
        return self.decode(ShaObject, response, "POST", self.client.url_for(path)).sha

    async def write_commit(
        self, repo: RepositoryRef, message: str, tree_id: str, parent_commit_id: str
    ) -> str:
        path = f"repos/{repo.full_name}/git/commits"
        response = await self.client.post(
            path, data={"message": message, "tree": tree_id, "parents": [parent_commit_id]}
        )
        return self.decode(ShaObject, response, "POST", self.client.url_for(path)).sha

    async def update_ref(self, repo: RepositoryRef, branch: str, commit_id: str) -> None:
        await self.client.patch(
            f"repos/{repo.full_name}/git/refs/heads/{branch}",
            data={"sha": commit_id, "force": False},
        )
        logger.info(f"Branch {branch} of {repo.full_name} now points at {commit_id}")

    async def count_workflows(self, repo: RepositoryRef) -> int:
        path = f"repos/{repo.full_name}/actions/workflows"
        try:
            response = await self.client.get(path)
        except RemoteRequestError as e:
            if e.status_code == 404:
                return 0
            raise
        return self.decode(GitHubWorkflowList, response, "GET", self.client.url_for(path)).total_count

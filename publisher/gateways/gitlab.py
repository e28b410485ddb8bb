"""
GitLab gateway built on the v4 repository files and commits API.
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote

from common.config.config import GITLAB_PIPELINE_PATH, INITIAL_COMMIT_MESSAGE
from publisher.api.client import GitLabAPIClient
from publisher.errors import RefNotFound, RemoteRequestError
from publisher.gateways.base import BatchCommitGateway, RemoteRepositoryGateway
from publisher.models.payloads import GitLabBranch, GitLabCommit, GitLabProject, GitLabUser
from publisher.models.types import HeadCommit, Provider, RepositoryRef

logger = logging.getLogger(__name__)

PROJECTS_PAGE_SIZE = 100


def encode_path(path: str) -> str:
    """URL-encode a project or file path as GitLab expects in path segments."""
    return quote(path, safe="")


class GitLabGateway(RemoteRepositoryGateway, BatchCommitGateway):
    """GitLab operations: projects, repository files and batched commits."""

    provider = Provider.GITLAB
    pipeline_config_path = GITLAB_PIPELINE_PATH

    def __init__(self, client: GitLabAPIClient):
        super().__init__(client)
        self._project_ids: Dict[str, int] = {}

    async def create_repository(self, name: str, workspace: Optional[str] = None) -> str:
        """Create a public project in the user's namespace.

        Returns:
            path_with_namespace of the created project
        """
        response = await self.client.post("projects", data={"name": name, "visibility": "public"})
        project = self.decode(GitLabProject, response, "POST", self.client.url_for("projects"))
        self._project_ids[project.path_with_namespace] = project.id
        logger.info(f"GitLab repository created successfully: {project.path_with_namespace}")
        return project.path_with_namespace

    async def resolve_project_id(self, repo: RepositoryRef) -> int:
        """Find the project among the authenticated user's projects.

        The id is cached for the lifetime of the gateway.

        Raises:
            RemoteRequestError: If the user has no project with that path
        """
        cached = self._project_ids.get(repo.full_name)
        if cached is not None:
            return cached

        user = self.decode(GitLabUser, await self.client.get("user"), "GET", self.client.url_for("user"))

        path = f"users/{user.id}/projects"
        projects = await self.client.get(path, params={"per_page": PROJECTS_PAGE_SIZE})
        for item in projects or []:
            project = self.decode(GitLabProject, item, "GET", self.client.url_for(path))
            if project.path_with_namespace == repo.full_name:
                self._project_ids[repo.full_name] = project.id
                return project.id

        raise RemoteRequestError(
            "GET",
            self.client.url_for(path),
            404,
            f"Project {repo.full_name} not found for user ID {user.id}",
        )

    async def file_exists(self, repo: RepositoryRef, branch: str, path: str) -> bool:
        project_id = await self.resolve_project_id(repo)
        return await self.client.exists(
            f"projects/{project_id}/repository/files/{encode_path(path)}/raw",
            params={"ref": branch},
        )

    async def seed_readme(self, repo: RepositoryRef, branch: str, path: str, content: str) -> None:
        await self.client.post(
            f"projects/{encode_path(repo.full_name)}/repository/files/{encode_path(path)}",
            data={
                "branch": branch,
                "content": content,
                "commit_message": INITIAL_COMMIT_MESSAGE,
            },
        )
        logger.info(f"GitLab repository {repo.full_name} initialized with {path}")

    async def get_head_commit(self, repo: RepositoryRef, branch: str) -> HeadCommit:
        project_id = await self.resolve_project_id(repo)
        path = f"projects/{project_id}/repository/branches/{encode_path(branch)}"
        try:
            response = await self.client.get(path)
        except RemoteRequestError as e:
            if e.status_code == 404:
                raise RefNotFound(e.method, e.url, e.status_code, e.provider_message) from e
            raise
        branch_data = self.decode(GitLabBranch, response, "GET", self.client.url_for(path))
        return HeadCommit(commit_id=branch_data.commit.id)

    async def batch_commit_actions(
        self,
        repo: RepositoryRef,
        branch: str,
        message: str,
        actions: List[Dict[str, str]],
    ) -> str:
        project_id = await self.resolve_project_id(repo)
        path = f"projects/{project_id}/repository/commits"
        response = await self.client.post(
            path,
            data={"branch": branch, "commit_message": message, "actions": actions},
        )
        commit = self.decode(GitLabCommit, response, "POST", self.client.url_for(path))
        logger.info(f"Commit successfully created: {commit.id}")
        return commit.id

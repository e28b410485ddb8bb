"""
Remote repository gateway interface.

A gateway wraps one hosting provider's REST API behind typed operations. Beyond
the operations every provider offers, each gateway implements exactly one commit
capability (git objects, batched actions, or multipart upload); the orchestrator
picks its protocol from that capability.
"""

import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from publisher.api.client import ProviderAPIClient
from publisher.errors import RemoteRequestError
from publisher.models.types import FileAction, FileEntry, HeadCommit, Provider, RepositoryRef

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class RemoteRepositoryGateway(ABC):
    """Operations shared by every hosting provider."""

    provider: Provider
    pipeline_config_path: str

    def __init__(self, client: ProviderAPIClient):
        self.client = client

    def decode(self, model: Type[PayloadT], payload: Any, method: str, url: str) -> PayloadT:
        """Validate a provider payload against the fields the gateway relies on.

        Args:
            model: Payload model
            payload: Decoded JSON body
            method: HTTP method of the call that returned the payload
            url: URL of that call
        """
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise RemoteRequestError(
                method, url, None, f"Unexpected {model.__name__} payload: {e}"
            ) from e

    @abstractmethod
    async def create_repository(self, name: str, workspace: Optional[str] = None) -> str:
        """Create a repository and return its full name."""

    @abstractmethod
    async def file_exists(self, repo: RepositoryRef, branch: str, path: str) -> bool:
        """Check whether a file is tracked on a branch."""

    @abstractmethod
    async def seed_readme(self, repo: RepositoryRef, branch: str, path: str, content: str) -> None:
        """Write the initial README through a single-file create call."""

    @abstractmethod
    async def get_head_commit(self, repo: RepositoryRef, branch: str) -> HeadCommit:
        """Read the branch head.

        Raises:
            RefNotFound: If the branch has no commits yet
        """

    async def readme_exists(self, repo: RepositoryRef, branch: str, path: str) -> bool:
        exists = await self.file_exists(repo, branch, path)
        logger.info(f"{path} {'exists' if exists else 'does not exist'} in {repo.full_name}")
        return exists


class GitObjectGateway(ABC):
    """Commit capability built on the Git object graph API."""

    @abstractmethod
    async def get_tree(self, repo: RepositoryRef, head: HeadCommit) -> str:
        """Return the tree id of the head commit."""

    @abstractmethod
    async def write_tree(
        self, repo: RepositoryRef, base_tree_id: str, files: Sequence[FileEntry]
    ) -> str:
        """Create a tree from a base tree plus the given files."""

    @abstractmethod
    async def write_commit(
        self, repo: RepositoryRef, message: str, tree_id: str, parent_commit_id: str
    ) -> str:
        """Create a commit object with a single parent."""

    @abstractmethod
    async def update_ref(self, repo: RepositoryRef, branch: str, commit_id: str) -> None:
        """Fast-forward a branch to a commit."""


class BatchCommitGateway(ABC):
    """Commit capability built on a single batched-actions call."""

    @abstractmethod
    async def resolve_project_id(self, repo: RepositoryRef) -> int:
        """Resolve the numeric project id of a repository."""

    @abstractmethod
    async def batch_commit_actions(
        self,
        repo: RepositoryRef,
        branch: str,
        message: str,
        actions: List[Dict[str, str]],
    ) -> str:
        """Submit every file action as one commit and return its id."""

    @staticmethod
    def build_action(entry: FileEntry, action: FileAction) -> Dict[str, str]:
        text = entry.text()
        if text is None:
            return {
                "action": action.value,
                "file_path": entry.repo_relative_path,
                "content": base64.b64encode(entry.content).decode("ascii"),
                "encoding": "base64",
            }
        return {
            "action": action.value,
            "file_path": entry.repo_relative_path,
            "content": text,
        }


class MultipartCommitGateway(ABC):
    """Commit capability built on a multipart source upload."""

    @abstractmethod
    async def enable_pipelines(self, repo: RepositoryRef) -> None:
        """Switch on the provider's pipelines for a repository."""

    @abstractmethod
    async def multipart_publish(
        self,
        repo: RepositoryRef,
        branch: str,
        message: str,
        parent_commit_id: str,
        files: Sequence[FileEntry],
    ) -> None:
        """Upload every file plus commit metadata in one multipart request."""


class WorkspaceScopedGateway(ABC):
    """Providers whose repositories live under an account workspace."""

    @abstractmethod
    async def list_workspaces(self) -> List[str]:
        """List workspace slugs available to the account."""


class WorkflowRegistrationGateway(ABC):
    """Providers whose CI registers committed workflows asynchronously."""

    @abstractmethod
    async def count_workflows(self, repo: RepositoryRef) -> int:
        """Return how many CI workflows the provider currently has registered."""

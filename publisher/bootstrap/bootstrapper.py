"""
Repository bootstrapping.

Makes sure the target repository exists and has at least one commit. The git
object protocol can only extend an existing tree, so an empty repository is
seeded with a README before anything else is committed.
"""

import logging
from typing import Optional

from common.config.config import DEFAULT_BRANCH, README_PATH
from publisher.errors import (
    InvalidCommitRequest,
    PublishError,
    RepositoryBootstrapFailed,
    RepositoryCreateFailed,
)
from publisher.gateways.base import RemoteRepositoryGateway, WorkspaceScopedGateway
from publisher.models.types import RepositoryMode, RepositoryRef

logger = logging.getLogger(__name__)


class RepositoryBootstrapper:
    """Creates or validates the target repository and seeds it when empty."""

    def __init__(self, gateway: RemoteRepositoryGateway, branch: str = DEFAULT_BRANCH):
        """Initialize bootstrapper.

        Args:
            gateway: Gateway of the selected provider
            branch: Branch to seed
        """
        self.gateway = gateway
        self.branch = branch
        self._workspace: Optional[str] = None

    async def ensure_repository(self, desired_name: str, mode: RepositoryMode) -> RepositoryRef:
        """Return a repository that exists and has at least one commit.

        Args:
            desired_name: Name of the repository to create, or owner/name of an existing one
            mode: Whether to create the repository or use an existing one

        Raises:
            RepositoryCreateFailed: If the provider rejects the creation
            RepositoryBootstrapFailed: If the README seed cannot be written
        """
        if mode == RepositoryMode.CREATE_NEW:
            full_name = await self._create(desired_name)
        else:
            full_name = desired_name.strip().strip("/")
            if full_name.count("/") < 1:
                raise InvalidCommitRequest(
                    f"Expected the full repository name (e.g. owner/repo), got '{desired_name}'"
                )

        repo = RepositoryRef(provider=self.gateway.provider, full_name=full_name)
        await self.seed_readme_if_empty(repo)
        return repo

    async def _create(self, name: str) -> str:
        try:
            workspace = await self.select_workspace()
            logger.info(f"Creating {self.gateway.provider.value} repository {name}")
            return await self.gateway.create_repository(name, workspace=workspace)
        except RepositoryCreateFailed:
            raise
        except PublishError as e:
            raise RepositoryCreateFailed(f"Failed to create repository {name}: {e}") from e

    async def select_workspace(self) -> Optional[str]:
        """Pick the workspace new repositories are created in.

        Only workspace-scoped providers have one. The first workspace of the
        account is used and remembered for the rest of the run.

        Raises:
            RepositoryCreateFailed: If the account has no workspace
        """
        if not isinstance(self.gateway, WorkspaceScopedGateway):
            return None
        if self._workspace is None:
            workspaces = await self.gateway.list_workspaces()
            if not workspaces:
                raise RepositoryCreateFailed("No workspaces found for this account.")
            self._workspace = workspaces[0]
            logger.info(f"Selected workspace: {self._workspace}")
        return self._workspace

    async def seed_readme_if_empty(self, repo: RepositoryRef) -> bool:
        """Write `# <name>` as README when the repository has none.

        Returns:
            True if a README was written

        Raises:
            RepositoryBootstrapFailed: If the check or the write fails
        """
        try:
            if await self.gateway.readme_exists(repo, self.branch, README_PATH):
                return False
            logger.warning(f"{repo.full_name} has no {README_PATH}, initializing repository")
            await self.gateway.seed_readme(
                repo, self.branch, README_PATH, f"# {repo.short_name}"
            )
        except PublishError as e:
            logger.error(f"Failed to initialize repository {repo.full_name}: {e}")
            raise RepositoryBootstrapFailed(
                f"Failed to initialize repository {repo.full_name}: {e}"
            ) from e
        return True

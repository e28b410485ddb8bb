"""
Main Publish Service - single entry point for publishing files to a hosted repository.

A publish run goes through:
- Staging: local files are read and mapped to repository paths
- Bootstrap: the repository is created or validated, and seeded when empty
- Commit: the provider protocol lands every file as one commit
- Verification: for providers with asynchronous CI registration, the workflow is polled
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import httpx

from common.config.config import (
    DEFAULT_BRANCH,
    DEFAULT_COMMIT_MESSAGE,
    VERIFY_DELAY_SECONDS,
    VERIFY_MAX_RETRIES,
    VERIFY_SETTLE_SECONDS,
)
from publisher.auth.credentials import resolve_credential
from publisher.bootstrap.bootstrapper import RepositoryBootstrapper
from publisher.files import stage_files
from publisher.gateways.base import RemoteRepositoryGateway, WorkflowRegistrationGateway
from publisher.gateways.factory import create_gateway
from publisher.models.types import (
    CommitRequest,
    CommitResult,
    Provider,
    RepositoryMode,
    RepositoryRef,
    VerificationOutcome,
)
from publisher.orchestrator.orchestrator import CommitOrchestrator
from publisher.verification.verifier import PublishVerifier, Sleep

logger = logging.getLogger(__name__)


@dataclass
class PublishReport:
    repository: RepositoryRef
    commit: CommitResult
    verification: Optional[VerificationOutcome] = None


class PublishService:
    """
    Unified publish service wiring bootstrapper, orchestrator and verifier
    around one provider gateway.
    """

    def __init__(
        self,
        gateway: RemoteRepositoryGateway,
        branch: str = DEFAULT_BRANCH,
        sleep: Sleep = asyncio.sleep,
    ):
        """Initialize publish service.

        Args:
            gateway: Gateway of the selected provider
            branch: Target branch
            sleep: Coroutine used for every wait (settle delay and polling)
        """
        self.gateway = gateway
        self.branch = branch
        self._sleep = sleep

        self.bootstrapper = RepositoryBootstrapper(gateway, branch=branch)
        self.orchestrator = CommitOrchestrator(gateway)
        self.verifier: Optional[PublishVerifier] = None
        if isinstance(gateway, WorkflowRegistrationGateway):
            self.verifier = PublishVerifier(gateway, sleep=sleep)

    @classmethod
    def for_provider(
        cls,
        provider: Provider,
        token: Optional[str] = None,
        username: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "PublishService":
        """Build a service from configuration for one provider.

        Raises:
            AuthenticationMissing: If no credential is configured
        """
        credential = resolve_credential(provider, token=token, username=username)
        return cls(create_gateway(credential, base_url=base_url, transport=transport))

    async def publish(
        self,
        desired_name: str,
        mode: RepositoryMode,
        file_paths: Sequence[str],
        message: str = DEFAULT_COMMIT_MESSAGE,
        verify: bool = True,
        base_dir: Optional[str] = None,
    ) -> PublishReport:
        """Publish local files as one commit.

        Args:
            desired_name: Repository to create, or owner/name of an existing one
            mode: Create a new repository or use an existing one
            file_paths: Local files, in commit order
            message: Commit message
            verify: Whether to poll CI workflow registration afterwards
            base_dir: Directory mapped to the repository root (defaults to cwd)

        Returns:
            PublishReport with the repository, commit and verification outcome

        Raises:
            PublishError: If any stage fails
        """
        # Local problems must surface before any remote call
        files = stage_files(file_paths, base_dir=base_dir)
        CommitRequest.validate_contents(message, files)

        repo = await self.bootstrapper.ensure_repository(desired_name, mode)
        request = CommitRequest(
            repository=repo, message=message, files=files, branch=self.branch
        )
        commit = await self.orchestrator.publish(request)

        verification = None
        if verify and self.verifier is not None:
            verification = await self.verify(repo)

        return PublishReport(repository=repo, commit=commit, verification=verification)

    async def verify(
        self,
        repo: RepositoryRef,
        settle_seconds: float = VERIFY_SETTLE_SECONDS,
        max_retries: int = VERIFY_MAX_RETRIES,
        delay: float = VERIFY_DELAY_SECONDS,
    ) -> Optional[VerificationOutcome]:
        """Wait for the provider to pick up the commit, then poll workflow registration.

        Returns:
            VerificationOutcome, or None when the provider has nothing to verify
        """
        if self.verifier is None:
            return None
        await self._sleep(settle_seconds)
        outcome = await self.verifier.verify_downstream_registration(
            repo, self.branch, max_retries=max_retries, delay=delay
        )
        if outcome.found:
            logger.info("GitHub Actions workflow was successfully created.")
        else:
            logger.warning("Failed to create GitHub Actions workflow.")
        return outcome

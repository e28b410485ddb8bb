"""
Commit orchestration: lands a CommitRequest as one remote commit.
"""

import logging
from typing import List, Tuple, Type

from publisher.errors import UnsupportedProvider
from publisher.gateways.base import (
    BatchCommitGateway,
    GitObjectGateway,
    MultipartCommitGateway,
    RemoteRepositoryGateway,
)
from publisher.models.types import CommitRequest, CommitResult
from publisher.orchestrator.steps import run_pipeline
from publisher.orchestrator.strategies import (
    BatchActionsCommitStrategy,
    CommitStrategy,
    GitObjectCommitStrategy,
    MultipartCommitStrategy,
)

logger = logging.getLogger(__name__)

STRATEGIES: List[Tuple[type, Type[CommitStrategy]]] = [
    (GitObjectGateway, GitObjectCommitStrategy),
    (BatchCommitGateway, BatchActionsCommitStrategy),
    (MultipartCommitGateway, MultipartCommitStrategy),
]


class CommitOrchestrator:
    """Runs the commit protocol matching the gateway's commit capability."""

    def __init__(self, gateway: RemoteRepositoryGateway):
        """Initialize orchestrator.

        Args:
            gateway: Gateway of the selected provider

        Raises:
            UnsupportedProvider: If the gateway offers no commit capability
        """
        self.gateway = gateway
        self.strategy = self._select_strategy(gateway)

    @staticmethod
    def _select_strategy(gateway: RemoteRepositoryGateway) -> CommitStrategy:
        for capability, strategy_class in STRATEGIES:
            if isinstance(gateway, capability):
                return strategy_class(gateway)
        raise UnsupportedProvider(
            f"{type(gateway).__name__} does not implement a commit protocol"
        )

    async def publish(self, request: CommitRequest) -> CommitResult:
        """Commit every file of the request to the target branch.

        Args:
            request: Validated commit request

        Returns:
            CommitResult of the new commit

        Raises:
            PublishError: On the first failing step; no step is retried
        """
        logger.info(
            f"Committing {len(request.files)} files to {request.repository.full_name}"
            f"/{request.branch} with {type(self.strategy).__name__}"
        )
        steps = self.strategy.build_steps(request)
        return await run_pipeline(steps, request)

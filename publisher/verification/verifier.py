"""
Downstream registration polling.

After a pipeline file lands, the provider's CI registers the workflow
asynchronously. The verifier polls that registration a bounded number of times;
running out of attempts is a reportable outcome, not an error.
"""

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable

from common.config.config import DEFAULT_BRANCH, VERIFY_DELAY_SECONDS, VERIFY_MAX_RETRIES
from publisher.gateways.base import WorkflowRegistrationGateway
from publisher.models.types import RepositoryRef, VerificationAttempt, VerificationOutcome

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class PublishVerifier:
    """Polls CI workflow registration with a fixed delay between attempts."""

    def __init__(self, gateway: WorkflowRegistrationGateway, sleep: Sleep = asyncio.sleep):
        """Initialize verifier.

        Args:
            gateway: Gateway able to list registered workflows
            sleep: Coroutine used to wait between attempts
        """
        self.gateway = gateway
        self._sleep = sleep

    async def poll(
        self,
        repo: RepositoryRef,
        max_retries: int = VERIFY_MAX_RETRIES,
        delay: float = VERIFY_DELAY_SECONDS,
    ) -> AsyncIterator[VerificationAttempt]:
        """Yield one attempt per poll, waiting `delay` seconds between polls.

        The caller decides when to stop; no wait follows the final attempt.
        """
        for attempt in range(1, max_retries + 1):
            count = await self.gateway.count_workflows(repo)
            found = count > 0
            logger.info(
                f"Attempt {attempt}: GitHub Actions workflow verification - "
                f"{'exists' if found else 'does not exist'}"
            )
            yield VerificationAttempt(attempt=attempt, found=found)
            if attempt < max_retries:
                await self._sleep(delay)

    async def verify_downstream_registration(
        self,
        repo: RepositoryRef,
        branch: str = DEFAULT_BRANCH,
        max_retries: int = VERIFY_MAX_RETRIES,
        delay: float = VERIFY_DELAY_SECONDS,
    ) -> VerificationOutcome:
        """Check whether the committed workflow got registered.

        Args:
            repo: Repository that received the commit
            branch: Branch that received the commit
            max_retries: Number of polls
            delay: Seconds between polls

        Returns:
            VerificationOutcome; found=False after exhausting every poll
        """
        logger.info(f"Verifying GitHub Actions workflow for repository {repo.full_name} ({branch})")
        attempts_used = 0
        attempts = self.poll(repo, max_retries, delay)
        try:
            async for attempt in attempts:
                attempts_used = attempt.attempt
                if attempt.found:
                    return VerificationOutcome(found=True, attempts_used=attempts_used)
        finally:
            await attempts.aclose()

        logger.warning(
            f"No workflow registered for {repo.full_name} after {attempts_used} attempts"
        )
        return VerificationOutcome(found=False, attempts_used=attempts_used)

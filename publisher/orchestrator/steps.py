"""
Ordered pipelines of dependent remote calls.

Each step receives the previous step's output. The first failure aborts the
pipeline: nothing is retried and nothing is rolled back, which is safe because
every protocol puts its only visible mutation (the branch update) last.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from publisher.errors import PublishError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineStep:
    name: str
    run: Callable[[Any], Awaitable[Any]]


async def run_pipeline(steps: Sequence[PipelineStep], initial: Any) -> Any:
    """Run steps in order, feeding each output into the next step.

    Raises:
        PublishError: The failing step's error, tagged with the step name
    """
    value = initial
    total = len(steps)
    for index, step in enumerate(steps, start=1):
        logger.info(f"[Step {index}/{total}] {step.name}")
        try:
            value = await step.run(value)
        except PublishError as e:
            if e.step is None:
                e.step = step.name
            logger.error(f"[Step {index}/{total}] {step.name} failed: {e.message}")
            raise
    return value

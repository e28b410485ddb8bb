"""
Commit orchestration package.
"""

from publisher.orchestrator.orchestrator import CommitOrchestrator
from publisher.orchestrator.steps import PipelineStep, run_pipeline

__all__ = ["CommitOrchestrator", "PipelineStep", "run_pipeline"]

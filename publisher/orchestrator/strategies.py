"""
Provider commit protocols.

Each strategy turns a CommitRequest into an explicit pipeline of gateway calls:

- GitObjectCommitStrategy: head → base tree → new tree → new commit → ref update
- BatchActionsCommitStrategy: project → concurrent existence probes → batched commit
- MultipartCommitStrategy: pipelines check → head → multipart upload
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Tuple

from publisher.gateways.base import (
    BatchCommitGateway,
    GitObjectGateway,
    MultipartCommitGateway,
    RemoteRepositoryGateway,
)
from publisher.models.types import (
    CommitRequest,
    CommitResult,
    FileAction,
    FileEntry,
    HeadCommit,
    StagedTree,
)
from publisher.orchestrator.steps import PipelineStep

logger = logging.getLogger(__name__)


class CommitStrategy(ABC):
    """Builds the ordered steps that land one CommitRequest as one commit."""

    def __init__(self, gateway: Any):
        self.gateway = gateway

    @abstractmethod
    def build_steps(self, request: CommitRequest) -> List[PipelineStep]:
        """Return the pipeline for a request; its first input is the request itself."""


class GitObjectCommitStrategy(CommitStrategy):
    """Five dependent calls against the Git object graph.

    The branch ref is only moved by the last step, so a failure anywhere before
    it leaves the repository exactly as it was.
    """

    gateway: GitObjectGateway

    def build_steps(self, request: CommitRequest) -> List[PipelineStep]:
        repo, branch = request.repository, request.branch

        async def read_head(_: CommitRequest) -> HeadCommit:
            head = await self.gateway.get_head_commit(repo, branch)
            logger.info(f"Latest commit on {repo.full_name}/{branch}: {head.commit_id}")
            return head

        async def read_base_tree(head: HeadCommit) -> HeadCommit:
            tree_id = await self.gateway.get_tree(repo, head)
            return HeadCommit(commit_id=head.commit_id, tree_id=tree_id)

        async def write_tree(head: HeadCommit) -> StagedTree:
            tree_id = await self.gateway.write_tree(repo, head.tree_id, request.files)
            return StagedTree(tree_id=tree_id, parent_commit_id=head.commit_id)

        async def write_commit(staged: StagedTree) -> str:
            return await self.gateway.write_commit(
                repo, request.message, staged.tree_id, staged.parent_commit_id
            )

        async def update_ref(commit_id: str) -> CommitResult:
            await self.gateway.update_ref(repo, branch, commit_id)
            logger.info(f"Commit successfully created: {commit_id}")
            return CommitResult(committed=True, remote_commit_id=commit_id)

        return [
            PipelineStep("read branch head", read_head),
            PipelineStep("read base tree", read_base_tree),
            PipelineStep("create tree", write_tree),
            PipelineStep("create commit", write_commit),
            PipelineStep("update branch ref", update_ref),
        ]


class BatchActionsCommitStrategy(CommitStrategy):
    """Per-file create/update resolution followed by one batched commit."""

    gateway: BatchCommitGateway

    def build_steps(self, request: CommitRequest) -> List[PipelineStep]:
        repo, branch = request.repository, request.branch

        async def resolve_project(req: CommitRequest) -> CommitRequest:
            project_id = await self.gateway.resolve_project_id(repo)
            logger.info(f"Resolved {repo.full_name} to project {project_id}")
            return req

        async def probe(entry: FileEntry) -> Tuple[FileEntry, FileAction]:
            exists = await self.gateway.file_exists(repo, branch, entry.repo_relative_path)
            return entry, FileAction.UPDATE if exists else FileAction.CREATE

        async def resolve_actions(req: CommitRequest) -> List[Tuple[FileEntry, FileAction]]:
            # Probes are read-only and address disjoint paths
            tasks = [asyncio.ensure_future(probe(entry)) for entry in req.files]
            try:
                return list(await asyncio.gather(*tasks))
            except Exception:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        async def commit_actions(resolved: List[Tuple[FileEntry, FileAction]]) -> CommitResult:
            actions = [BatchCommitGateway.build_action(entry, action) for entry, action in resolved]
            commit_id = await self.gateway.batch_commit_actions(
                repo, branch, request.message, actions
            )
            return CommitResult(
                committed=True,
                remote_commit_id=commit_id,
                per_file_action={entry.repo_relative_path: action for entry, action in resolved},
            )

        return [
            PipelineStep("resolve project", resolve_project),
            PipelineStep("probe existing files", resolve_actions),
            PipelineStep("commit actions", commit_actions),
        ]


class MultipartCommitStrategy(CommitStrategy):
    """Pipelines check, branch head lookup and a single multipart upload."""

    gateway: MultipartCommitGateway

    def build_steps(self, request: CommitRequest) -> List[PipelineStep]:
        repo, branch = request.repository, request.branch
        gateway: RemoteRepositoryGateway = self.gateway

        async def ensure_pipelines(req: CommitRequest) -> CommitRequest:
            config_path = gateway.pipeline_config_path
            if not await gateway.file_exists(repo, branch, config_path):
                # Without this, the first pipeline commit does not trigger anything
                logger.warning(f"{config_path} is not tracked yet, enabling pipelines")
                await self.gateway.enable_pipelines(repo)
            return req

        async def read_head(_: CommitRequest) -> HeadCommit:
            return await gateway.get_head_commit(repo, branch)

        async def upload(head: HeadCommit) -> CommitResult:
            await self.gateway.multipart_publish(
                repo, branch, request.message, head.commit_id, request.files
            )
            return CommitResult(committed=True)

        return [
            PipelineStep("check pipeline configuration", ensure_pipelines),
            PipelineStep("read branch head", read_head),
            PipelineStep("upload files", upload),
        ]

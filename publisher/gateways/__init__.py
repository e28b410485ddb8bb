"""
Remote Repository Gateways

Typed operations over each hosting provider's REST API:
- GitHub: git database API (refs, trees, commits) and Actions workflows
- GitLab: repository files and batched commit actions
- Bitbucket: workspaces, pipelines config and multipart src uploads
"""

from publisher.gateways.base import (
    BatchCommitGateway,
    GitObjectGateway,
    MultipartCommitGateway,
    RemoteRepositoryGateway,
    WorkflowRegistrationGateway,
    WorkspaceScopedGateway,
)
from publisher.gateways.bitbucket import BitbucketGateway
from publisher.gateways.factory import create_gateway
from publisher.gateways.github import GitHubGateway
from publisher.gateways.gitlab import GitLabGateway

__all__ = [
    "RemoteRepositoryGateway",
    "GitObjectGateway",
    "BatchCommitGateway",
    "MultipartCommitGateway",
    "WorkspaceScopedGateway",
    "WorkflowRegistrationGateway",
    "GitHubGateway",
    "GitLabGateway",
    "BitbucketGateway",
    "create_gateway",
]

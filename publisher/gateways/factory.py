"""
Gateway factory: one gateway per provider, selected once per run.
"""

from typing import Optional

import httpx

from publisher.api.client import BitbucketAPIClient, GitHubAPIClient, GitLabAPIClient
from publisher.errors import UnsupportedProvider
from publisher.gateways.base import RemoteRepositoryGateway
from publisher.gateways.bitbucket import BitbucketGateway
from publisher.gateways.github import GitHubGateway
from publisher.gateways.gitlab import GitLabGateway
from publisher.models.types import Credential, Provider


def create_gateway(
    credential: Credential,
    base_url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RemoteRepositoryGateway:
    """Build the gateway matching the credential's provider.

    Args:
        credential: Provider credential
        base_url: Override of the provider API root (self-hosted instances, tests)
        transport: Custom httpx transport

    Raises:
        UnsupportedProvider: If the provider has no gateway
    """
    kwargs = {"transport": transport}
    if base_url:
        kwargs["base_url"] = base_url

    if credential.provider == Provider.GITHUB:
        return GitHubGateway(GitHubAPIClient(credential, **kwargs))
    if credential.provider == Provider.GITLAB:
        return GitLabGateway(GitLabAPIClient(credential, **kwargs))
    if credential.provider == Provider.BITBUCKET:
        return BitbucketGateway(BitbucketAPIClient(credential, **kwargs))
    raise UnsupportedProvider(f"Unsupported version control platform: {credential.provider}")

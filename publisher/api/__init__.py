"""
Provider API Module

Authenticated HTTP clients for the supported hosting providers.
"""

from publisher.api.client import (
    BitbucketAPIClient,
    GitHubAPIClient,
    GitLabAPIClient,
    ProviderAPIClient,
)

__all__ = [
    "ProviderAPIClient",
    "GitHubAPIClient",
    "GitLabAPIClient",
    "BitbucketAPIClient",
]

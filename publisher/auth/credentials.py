"""
Provider credential resolution.
"""

import logging
from typing import Optional

from common.config import config
from publisher.errors import AuthenticationMissing, UnsupportedProvider
from publisher.models.types import Credential, Provider

logger = logging.getLogger(__name__)

TOKEN_SETTINGS = {
    Provider.GITHUB: "GITHUB_TOKEN",
    Provider.GITLAB: "GITLAB_TOKEN",
    Provider.BITBUCKET: "BITBUCKET_TOKEN",
}


def resolve_credential(
    provider: Provider,
    token: Optional[str] = None,
    username: Optional[str] = None,
) -> Credential:
    """Build the credential for a provider.

    Explicit values win over configuration.

    Args:
        provider: Selected provider
        token: Token or app password (defaults to the provider's *_TOKEN setting)
        username: Bitbucket account username (defaults to BITBUCKET_USERNAME)

    Raises:
        AuthenticationMissing: If the token (or Bitbucket username) is not configured
    """
    setting = TOKEN_SETTINGS.get(provider)
    if setting is None:
        raise UnsupportedProvider(f"Unsupported version control platform: {provider}")

    secret = token or getattr(config, setting)
    if not secret:
        raise AuthenticationMissing(f"{setting} is not set")

    if provider == Provider.BITBUCKET:
        username = username or config.BITBUCKET_USERNAME
        if not username:
            raise AuthenticationMissing("BITBUCKET_USERNAME is not set")
        logger.info(f"Using Bitbucket credentials for user {username}")
        return Credential(provider=provider, secret=secret, username=username)

    logger.info(f"Using {provider.value} token from {'arguments' if token else setting}")
    return Credential(provider=provider, secret=secret)

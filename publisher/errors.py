"""
Structured errors raised by the publisher.

Every failure surfaced to callers derives from PublishError. Remote failures keep
the provider's HTTP status and message verbatim so callers never have to parse
provider-specific payloads.
"""

from typing import Optional


class PublishError(Exception):
    """Base class for publish failures.

    Attributes:
        step: Name of the pipeline step that was running when the error was
            raised, filled in by the orchestrator.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.step: Optional[str] = None

    def __str__(self) -> str:
        if self.step:
            return f"[{self.step}] {self.message}"
        return self.message


class AuthenticationMissing(PublishError):
    """Raised when no credential is configured for the selected provider."""

    pass


class UnsupportedProvider(PublishError):
    """Raised when a provider or gateway capability is not supported."""

    pass


class InvalidCommitRequest(PublishError):
    """Raised when a commit request is malformed (duplicate paths, empty file list)."""

    pass


class FileNotFoundLocally(PublishError):
    """Raised when a file scheduled for commit cannot be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read local file {path}: {reason}")
        self.path = path


class RemoteRequestError(PublishError):
    """Raised when a provider API call fails.

    Attributes:
        method: HTTP method of the failed call
        url: Request URL
        status_code: HTTP status, or None for transport failures
        provider_message: Provider's error message, verbatim
    """

    def __init__(
        self,
        method: str,
        url: str,
        status_code: Optional[int],
        provider_message: str,
    ):
        if status_code is None:
            message = f"{method} {url} failed: {provider_message}"
        else:
            message = f"{method} {url} failed (status {status_code}): {provider_message}"
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code
        self.provider_message = provider_message


class RefNotFound(RemoteRequestError):
    """Raised when the target branch has no head commit yet."""

    pass


class RemoteWriteRejected(RemoteRequestError):
    """Raised when a mutating provider call does not succeed."""

    pass


class RepositoryCreateFailed(PublishError):
    """Raised when the provider refuses to create the repository."""

    pass


class RepositoryBootstrapFailed(PublishError):
    """Raised when the repository cannot be seeded with an initial commit."""

    pass

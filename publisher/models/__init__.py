"""
Publisher models.
"""

from publisher.models.types import (
    CommitRequest,
    CommitResult,
    Credential,
    FileAction,
    FileEntry,
    HeadCommit,
    Provider,
    RepositoryMode,
    RepositoryRef,
    StagedTree,
    VerificationAttempt,
    VerificationOutcome,
)

__all__ = [
    "CommitRequest",
    "CommitResult",
    "Credential",
    "FileAction",
    "FileEntry",
    "HeadCommit",
    "Provider",
    "RepositoryMode",
    "RepositoryRef",
    "StagedTree",
    "VerificationAttempt",
    "VerificationOutcome",
]

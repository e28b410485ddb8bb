"""
Shared types and models for publish operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

from common.config.config import DEFAULT_BRANCH
from publisher.errors import InvalidCommitRequest, UnsupportedProvider


def normalize_repo_path(path: str) -> str:
    """Convert a relative path to the forward-slash form used in repositories."""
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


class Provider(str, Enum):
    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"

    @classmethod
    def parse(cls, value: str) -> "Provider":
        """Resolve a provider from a case-insensitive name."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise UnsupportedProvider(f"Unsupported version control platform: {value}")


class RepositoryMode(str, Enum):
    CREATE_NEW = "create_new"
    USE_EXISTING = "use_existing"


class FileAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"


@dataclass(frozen=True)
class Credential:
    """Secret used to authenticate against one provider."""

    provider: Provider
    secret: str = field(repr=False)
    username: Optional[str] = None

    def __repr__(self) -> str:
        return f"Credential(provider={self.provider.value!r}, username={self.username!r}, secret='***')"


@dataclass(frozen=True)
class RepositoryRef:
    provider: Provider
    full_name: str
    default_branch: str = DEFAULT_BRANCH

    @property
    def short_name(self) -> str:
        return self.full_name.rstrip("/").split("/")[-1]


@dataclass(frozen=True)
class FileEntry:
    absolute_local_path: str
    repo_relative_path: str
    content: bytes = field(repr=False)

    def text(self) -> Optional[str]:
        """Return content decoded as UTF-8, or None for binary content."""
        try:
            return self.content.decode("utf-8")
        except UnicodeDecodeError:
            return None


@dataclass(frozen=True)
class CommitRequest:
    """One atomic publish attempt."""

    repository: RepositoryRef
    message: str
    files: Tuple[FileEntry, ...]
    branch: str = DEFAULT_BRANCH

    def __post_init__(self):
        object.__setattr__(self, "files", tuple(self.files))
        self.validate_contents(self.message, self.files)

    @staticmethod
    def validate_contents(message: str, files: Sequence[FileEntry]) -> None:
        """Check everything about a request that does not depend on the repository.

        Raises:
            InvalidCommitRequest: On an empty message, no files, a path that is
                not in normalized form, or two files mapping to one path
        """
        if not message:
            raise InvalidCommitRequest("Commit message must not be empty")
        if not files:
            raise InvalidCommitRequest("Commit request contains no files")

        seen: Dict[str, str] = {}
        for entry in files:
            path = normalize_repo_path(entry.repo_relative_path)
            previous = seen.get(path)
            if previous is not None:
                raise InvalidCommitRequest(
                    f"Duplicate repository path '{path}' "
                    f"for {previous} and {entry.absolute_local_path}"
                )
            if path != entry.repo_relative_path:
                raise InvalidCommitRequest(
                    f"Repository path '{entry.repo_relative_path}' is not normalized "
                    f"(expected '{path}')"
                )
            seen[path] = entry.absolute_local_path

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(entry.repo_relative_path for entry in self.files)


@dataclass
class CommitResult:
    committed: bool
    remote_commit_id: Optional[str] = None
    per_file_action: Dict[str, FileAction] = field(default_factory=dict)


@dataclass(frozen=True)
class HeadCommit:
    commit_id: str
    tree_id: Optional[str] = None


@dataclass(frozen=True)
class StagedTree:
    tree_id: str
    parent_commit_id: str


@dataclass(frozen=True)
class VerificationAttempt:
    attempt: int
    found: bool


@dataclass
class VerificationOutcome:
    found: bool
    attempts_used: int

    @property
    def timed_out(self) -> bool:
        return not self.found

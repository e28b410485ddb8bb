"""
Staging of local files for a commit.

Repository paths are always computed relative to the invocation working directory
and use forward slashes, whatever the host's path conventions, so the same set of
local files maps to identical remote paths on every platform.
"""

import logging
import os
from typing import Iterable, Optional, Tuple

from publisher.errors import FileNotFoundLocally, InvalidCommitRequest
from publisher.models.types import FileEntry, normalize_repo_path

logger = logging.getLogger(__name__)


def to_repo_path(local_path: str, base_dir: str, pathmod=os.path) -> str:
    """Compute the repository path of a local file.

    Args:
        local_path: Absolute or base-relative local path
        base_dir: Directory the repository root maps to
        pathmod: Path module of the host (os.path, ntpath, posixpath)

    Returns:
        Forward-slash repository path

    Raises:
        InvalidCommitRequest: If the file lies outside base_dir
    """
    absolute = pathmod.normpath(pathmod.join(base_dir, local_path))
    relative = normalize_repo_path(pathmod.relpath(absolute, base_dir))
    if relative == "." or relative == ".." or relative.startswith("../"):
        raise InvalidCommitRequest(
            f"{local_path} is outside of the working directory {base_dir}"
        )
    return relative


def stage_files(paths: Iterable[str], base_dir: Optional[str] = None) -> Tuple[FileEntry, ...]:
    """Read local files into commit entries, preserving order.

    Args:
        paths: Local file paths
        base_dir: Directory the repository root maps to (defaults to the working directory)

    Raises:
        FileNotFoundLocally: If a file cannot be read
        InvalidCommitRequest: If two files map to the same repository path
    """
    base_dir = os.path.abspath(base_dir or os.getcwd())
    entries = []
    seen = set()

    for local_path in paths:
        absolute = os.path.normpath(os.path.join(base_dir, local_path))
        repo_path = to_repo_path(absolute, base_dir)
        if repo_path in seen:
            raise InvalidCommitRequest(f"Duplicate repository path '{repo_path}'")
        seen.add(repo_path)

        try:
            with open(absolute, "rb") as f:
                content = f.read()
        except OSError as e:
            logger.error(f"Failed to read {absolute}: {e}")
            raise FileNotFoundLocally(absolute, e.strerror or str(e)) from e

        entries.append(
            FileEntry(absolute_local_path=absolute, repo_relative_path=repo_path, content=content)
        )
        logger.debug(f"Staged {absolute} as {repo_path} ({len(content)} bytes)")

    return tuple(entries)

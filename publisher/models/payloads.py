"""
Decoded provider API payloads.

Only the fields the gateways rely on are declared; everything else in the
provider responses is ignored.
"""

from typing import List

from pydantic import BaseModel


class ShaObject(BaseModel):
    sha: str


class GitHubRef(BaseModel):
    object: ShaObject


class GitHubCommit(BaseModel):
    sha: str
    tree: ShaObject


class GitHubRepository(BaseModel):
    full_name: str
    default_branch: str = "main"


class GitHubWorkflowList(BaseModel):
    total_count: int = 0


class GitLabUser(BaseModel):
    id: int


class GitLabProject(BaseModel):
    id: int
    path_with_namespace: str


class GitLabCommit(BaseModel):
    id: str


class GitLabBranch(BaseModel):
    commit: GitLabCommit


class BitbucketWorkspace(BaseModel):
    slug: str


class BitbucketWorkspacePage(BaseModel):
    values: List[BitbucketWorkspace] = []


class BitbucketRepository(BaseModel):
    full_name: str


class BitbucketTarget(BaseModel):
    hash: str


class BitbucketBranch(BaseModel):
    target: BitbucketTarget

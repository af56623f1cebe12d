"""Shared domain models for prbackport."""

import enum
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


class BuildState(enum.Enum):
    """Branch builder states."""

    FRESH = "fresh"
    RESUMED = "resumed"
    DONE = "done"


@dataclass(frozen=True)
class BackportRequest:
    """What the user asked for on the command line."""

    source_ref: str
    target_ref: str
    continue_run: bool = False
    local_only: bool = False
    pr_number: Optional[int] = None


@dataclass(frozen=True)
class CommitDescriptor:
    subject: str
    pr_number: Optional[int] = None


@dataclass(frozen=True)
class RepositoryContext:
    """The repository every git operation runs against."""

    root: str
    remotes: Dict[str, str] = field(default_factory=dict)

    def has_remote(self, name: str) -> bool:
        return name in self.remotes


@dataclass(frozen=True)
class RemoteIdentity:
    origin_owner: str
    upstream_repo: str


@dataclass(frozen=True)
class ForgeCredentials:
    """Forge access settings injected at startup."""

    token: Optional[str]
    host: str
    api_url: str

    def __repr__(self) -> str:
        masked = "***" if self.token else None
        return f"ForgeCredentials(token={masked!r}, host={self.host!r}, api_url={self.api_url!r})"


@dataclass(frozen=True)
class PullRequestMetadata:
    number: int
    url: str
    body: str = ""
    labels: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PullRequestDraft:
    """Arguments for opening the backport pull request."""

    repo: str
    base: str
    head: str
    title: str
    body: str
    assignee: Optional[str] = None
    labels: Tuple[str, ...] = ()

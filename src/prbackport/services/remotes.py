"""Remote URL parsing for prbackport."""

from typing import Tuple
from urllib.parse import urlparse

from prbackport.errors import BackportError
from prbackport.errors_catalog import actionable_error
from prbackport.models import RemoteIdentity, RepositoryContext


def parse_owner_repo(url: str) -> Tuple[str, str]:
    """Return ``(owner, repo)`` from a https, ssh or scp-like remote URL."""
    location = url.strip()
    if "://" in location:
        path = urlparse(location).path
    else:
        # scp-like syntax: [user@]host:owner/repo.git
        path = location.split(":", 1)[-1]

    path = path.strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]

    parts = [part for part in path.split("/") if part]
    if len(parts) < 2:
        raise BackportError(actionable_error("invalid_remote_url", url=url))
    return parts[-2], parts[-1]


def resolve_remote_identity(
    context: RepositoryContext,
    origin_remote: str,
    upstream_remote: str,
    logger=None,
) -> RemoteIdentity:
    if not context.has_remote(origin_remote):
        raise BackportError(
            actionable_error("remote_not_found", remote=origin_remote, key="origin_remote")
        )

    if not context.has_remote(upstream_remote):
        if logger:
            logger.warning(
                "Remote '%s' not found, using '%s' as upstream.", upstream_remote, origin_remote
            )
        upstream_remote = origin_remote

    origin_owner, _ = parse_owner_repo(context.remotes[origin_remote])
    upstream_owner, upstream_name = parse_owner_repo(context.remotes[upstream_remote])
    return RemoteIdentity(
        origin_owner=origin_owner,
        upstream_repo=f"{upstream_owner}/{upstream_name}",
    )

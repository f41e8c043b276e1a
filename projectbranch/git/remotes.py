"""Mapping of local git remotes onto hosted repositories."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from ..models import (
    AccessibleRepository,
    GitRemote,
    ParsedRemote,
    RemoteMapping,
    RemoteMappingResult,
)

DEFAULT_HOST = "github.com"
PREFERRED_REMOTE = "origin"

NO_GITHUB_REMOTE = "no-github-remote"
NOT_ACCESSIBLE = "not-accessible"

_GIT_SUFFIX = re.compile(r"\.git$", re.IGNORECASE)


def parse_remote_url(url: str | None, host: str = DEFAULT_HOST) -> Optional[ParsedRemote]:
    """Return owner/repo for a hosted-provider URL, or ``None`` for any other shape.

    Recognised forms are ``git@host:owner/repo``, ``https://host/owner/repo``
    (and ``http://``), and ``ssh://git@host/owner/repo``, each with an optional
    ``.git`` suffix.
    """
    if not url:
        return None

    scp_prefix = f"git@{host}:"
    ssh_prefix = f"ssh://git@{host}/"
    if url.startswith(scp_prefix):
        pathname = url[len(scp_prefix):]
    elif url.startswith((f"https://{host}/", f"http://{host}/")):
        pathname = urlparse(url).path[1:]
    elif url.startswith(ssh_prefix):
        pathname = url[len(ssh_prefix):]
    else:
        return None

    normalised = _GIT_SUFFIX.sub("", pathname)
    if normalised.endswith("/"):
        normalised = normalised[:-1]
    parts = [part for part in normalised.split("/") if part]
    if len(parts) < 2:
        return None

    owner, repo = parts[0], parts[1]
    return ParsedRemote(owner=owner, repo=repo, slug=f"{owner}/{repo}")


def map_local_to_hosted(
    remotes: Sequence[GitRemote],
    accessible_repositories: Iterable[AccessibleRepository] | None = None,
    *,
    host: str = DEFAULT_HOST,
) -> RemoteMappingResult:
    """Decide which hosted repository, if any, a local repository corresponds to."""
    hosted: List[Tuple[GitRemote, ParsedRemote]] = []
    for remote in remotes:
        parsed = parse_remote_url(remote.url, host)
        if parsed is not None:
            hosted.append((remote, parsed))

    if not hosted:
        return RemoteMappingResult(mapping=None, reason=NO_GITHUB_REMOTE)

    selected, parsed = next(
        (entry for entry in hosted if entry[0].name == PREFERRED_REMOTE),
        hosted[0],
    )

    accessible = {repository.full_name for repository in accessible_repositories or ()}
    if accessible and parsed.slug not in accessible:
        return RemoteMappingResult(mapping=None, reason=NOT_ACCESSIBLE)

    return RemoteMappingResult(
        mapping=RemoteMapping(
            remote_name=selected.name,
            owner=parsed.owner,
            repo=parsed.repo,
            full_name=parsed.slug,
        ),
        reason=None,
    )


__all__ = [
    "DEFAULT_HOST",
    "NOT_ACCESSIBLE",
    "NO_GITHUB_REMOTE",
    "map_local_to_hosted",
    "parse_remote_url",
]

"""Git adapters and remote mapping."""

from .remotes import NO_GITHUB_REMOTE, NOT_ACCESSIBLE, map_local_to_hosted, parse_remote_url
from .shell import GitCommandError, GitShellPort

__all__ = [
    "GitCommandError",
    "GitShellPort",
    "NOT_ACCESSIBLE",
    "NO_GITHUB_REMOTE",
    "map_local_to_hosted",
    "parse_remote_url",
]

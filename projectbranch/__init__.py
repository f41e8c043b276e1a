"""Discover documented git repositories and group their worktrees into projects."""

from .catalog import ProjectCatalogService
from .discovery import DiscoveryService
from .git.remotes import map_local_to_hosted, parse_remote_url
from .models import (
    EnrichedWorktree,
    GitMetadata,
    ProjectGroup,
    RemoteMappingResult,
    RepositoryCandidate,
)

__all__ = [
    "DiscoveryService",
    "EnrichedWorktree",
    "GitMetadata",
    "ProjectCatalogService",
    "ProjectGroup",
    "RemoteMappingResult",
    "RepositoryCandidate",
    "map_local_to_hosted",
    "parse_remote_url",
]

"""Core data models shared across projectbranch components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class MetadataKind(str, Enum):
    """Shape of the version-control marker found in a candidate directory."""

    NONE = "none"
    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class DirectoryEntry:
    """Single child returned by a filesystem listing."""

    name: str
    path: str
    is_directory: bool
    is_file: bool


@dataclass(frozen=True)
class GitMetadata:
    """Classification of a candidate's version-control linkage."""

    has_metadata: bool = False
    is_worktree: bool = False
    metadata_path: Optional[str] = None
    metadata_kind: MetadataKind = MetadataKind.NONE


@dataclass(frozen=True)
class RepositoryCandidate:
    """A directory found under a workspace root that may be a working copy."""

    root_path: str
    repository_path: str
    docs_path: str
    has_docs_folder: bool
    has_readme: bool
    git: GitMetadata

    def to_dict(self) -> Dict[str, Any]:
        return _serialise(asdict(self))


@dataclass(frozen=True)
class EnrichedWorktree(RepositoryCandidate):
    """A candidate augmented with the results of version-control queries."""

    branch_name: Optional[str] = None
    repository_identity: str = ""
    is_bare_repository: bool = False
    is_default: bool = False


@dataclass(frozen=True)
class ProjectGroup:
    """One logical project: every non-bare worktree sharing a repository identity."""

    project_id: str
    display_name: str
    project_path: str
    root_path: str
    default_worktree_path: str
    has_docs_folder: bool
    has_readme: bool
    worktrees: Tuple[EnrichedWorktree, ...] = field(default_factory=tuple)

    @property
    def worktree_count(self) -> int:
        return len(self.worktrees)

    @property
    def default_worktree(self) -> EnrichedWorktree:
        for worktree in self.worktrees:
            if worktree.is_default:
                return worktree
        raise LookupError(f"Project {self.project_id} has no default worktree")

    def to_dict(self) -> Dict[str, Any]:
        payload = _serialise(asdict(self))
        payload["worktree_count"] = self.worktree_count
        return payload


@dataclass(frozen=True)
class GitBranch:
    """Local branch as reported by the version-control binary."""

    name: str
    is_current: bool = False


@dataclass(frozen=True)
class GitRemote:
    """Fetch remote configured for a repository."""

    name: str
    url: str


@dataclass(frozen=True)
class BranchContext:
    """Active branch plus the local branch list for a working copy."""

    active_branch: str
    branches: Tuple[GitBranch, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return _serialise(asdict(self))


@dataclass(frozen=True)
class ParsedRemote:
    """Owner and repository extracted from a hosted-provider remote URL."""

    owner: str
    repo: str
    slug: str


@dataclass(frozen=True)
class AccessibleRepository:
    """Repository the signed-in account can reach on the hosting provider."""

    full_name: str


@dataclass(frozen=True)
class RemoteMapping:
    """Link between a local remote and a hosted repository."""

    remote_name: str
    owner: str
    repo: str
    full_name: str


@dataclass(frozen=True)
class RemoteMappingResult:
    """Either a mapping, or ``None`` together with a reason code."""

    mapping: Optional[RemoteMapping] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _serialise(asdict(self))


def _serialise(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _serialise(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialise(item) for item in value]
    return value


__all__ = [
    "AccessibleRepository",
    "BranchContext",
    "DirectoryEntry",
    "EnrichedWorktree",
    "GitBranch",
    "GitMetadata",
    "GitRemote",
    "MetadataKind",
    "ParsedRemote",
    "ProjectGroup",
    "RemoteMapping",
    "RemoteMappingResult",
    "RepositoryCandidate",
]

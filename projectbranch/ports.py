"""Interfaces the core consumes from filesystem, git and hosting adapters."""

from __future__ import annotations

from typing import List, Protocol, Sequence, runtime_checkable

from .models import AccessibleRepository, DirectoryEntry, GitBranch, GitRemote


class FileSystemPort(Protocol):
    """Filesystem access used by discovery, name resolution and documents."""

    def read_directory(self, path: str) -> List[DirectoryEntry]:
        """List immediate children of ``path``; raises ``OSError`` on failure."""

    def exists(self, path: str) -> bool: ...

    def is_directory(self, path: str) -> bool: ...

    def is_file(self, path: str) -> bool: ...

    def read_text(self, path: str) -> str: ...

    def write_text(self, path: str, contents: str) -> None: ...

    def ensure_directory(self, path: str) -> None: ...


class GitPort(Protocol):
    """Version-control queries backed by the git binary."""

    def get_current_branch(self, repo_path: str) -> str: ...

    def list_branches(self, repo_path: str) -> List[GitBranch]: ...

    def switch_branch(self, repo_path: str, name: str) -> None: ...

    def get_remotes(self, repo_path: str) -> List[GitRemote]:
        """Return fetch remotes, deduplicated by name with the first occurrence kept."""

    def get_common_directory(self, repo_path: str) -> str: ...


@runtime_checkable
class BareRepositoryProbe(Protocol):
    """Optional capability: ports that can tell whether a repository is bare."""

    def is_bare_repository(self, repo_path: str) -> bool: ...


class GitHubPort(Protocol):
    """Hosting-provider session that yields the repositories an account can reach."""

    def login(self) -> None: ...

    def list_accessible_repositories(self) -> Sequence[AccessibleRepository]: ...


__all__ = ["BareRepositoryProbe", "FileSystemPort", "GitHubPort", "GitPort"]

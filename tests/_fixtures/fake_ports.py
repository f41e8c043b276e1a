"""In-memory ports for exercising services without git or a real filesystem."""

from __future__ import annotations

import os
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from projectbranch.models import (
    DirectoryEntry,
    GitBranch,
    GitMetadata,
    GitRemote,
    MetadataKind,
    RepositoryCandidate,
)


class FakeGitPort:
    """Answers from dictionaries; a value that is an exception instance is raised."""

    def __init__(
        self,
        *,
        branches: Mapping[str, object] | None = None,
        common: Mapping[str, object] | None = None,
        bare: Mapping[str, object] | None = None,
        remotes: Mapping[str, object] | None = None,
        local_branches: Mapping[str, Sequence[str]] | None = None,
        default_branch: str = "main",
        default_common: Optional[str] = None,
    ) -> None:
        self.branches: Dict[str, object] = dict(branches or {})
        self.common = dict(common or {})
        self.bare = dict(bare or {})
        self.remotes = dict(remotes or {})
        self.local_branches = {key: list(value) for key, value in (local_branches or {}).items()}
        self.default_branch = default_branch
        self.default_common = default_common
        self.switched: List[tuple[str, str]] = []

    def get_current_branch(self, repo_path: str) -> str:
        return _answer(self.branches.get(repo_path, self.default_branch))

    def list_branches(self, repo_path: str) -> List[GitBranch]:
        names = self.local_branches.get(repo_path, [self.get_current_branch(repo_path)])
        return [GitBranch(name=name, is_current=False) for name in names]

    def switch_branch(self, repo_path: str, name: str) -> None:
        if name not in self.local_branches.get(repo_path, []):
            raise RuntimeError(f"unknown branch {name}")
        self.switched.append((repo_path, name))
        self.branches[repo_path] = name

    def get_remotes(self, repo_path: str) -> List[GitRemote]:
        return list(_answer(self.remotes.get(repo_path, [])))

    def get_common_directory(self, repo_path: str) -> str:
        default = self.default_common or os.path.join(repo_path, ".git")
        return _answer(self.common.get(repo_path, default))

    def is_bare_repository(self, repo_path: str) -> bool:
        return bool(_answer(self.bare.get(repo_path, False)))


class NoBareProbeGitPort:
    """Git port lacking the optional bare-repository capability."""

    def __init__(self, common: str) -> None:
        self._common = common

    def get_current_branch(self, repo_path: str) -> str:
        return "main"

    def list_branches(self, repo_path: str) -> List[GitBranch]:
        return []

    def switch_branch(self, repo_path: str, name: str) -> None:
        raise NotImplementedError

    def get_remotes(self, repo_path: str) -> List[GitRemote]:
        return []

    def get_common_directory(self, repo_path: str) -> str:
        return self._common


class MemoryFileSystemPort:
    """Serves file contents from a dictionary keyed by absolute path."""

    def __init__(self, files: Mapping[str, str] | None = None) -> None:
        self.files: Dict[str, str] = dict(files or {})
        self.directories: set[str] = set()

    def read_directory(self, path: str) -> List[DirectoryEntry]:
        return []

    def exists(self, path: str) -> bool:
        return path in self.files or path in self.directories

    def is_directory(self, path: str) -> bool:
        return path in self.directories

    def is_file(self, path: str) -> bool:
        return path in self.files

    def read_text(self, path: str) -> str:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def write_text(self, path: str, contents: str) -> None:
        self.files[path] = contents

    def ensure_directory(self, path: str) -> None:
        self.directories.add(path)


class StaticDiscovery:
    """Discovery stand-in returning fixed candidates and recording calls."""

    def __init__(self, candidates: Iterable[RepositoryCandidate]) -> None:
        self.candidates = list(candidates)
        self.calls: List[dict] = []

    def discover(self, root_paths, *, include_without_docs=None, cancel=None):  # type: ignore[no-untyped-def]
        self.calls.append(
            {"roots": list(root_paths), "include_without_docs": include_without_docs}
        )
        return list(self.candidates)


def make_candidate(
    repository_path: str,
    *,
    root_path: str = "/work",
    has_docs_folder: bool = True,
    has_readme: bool = True,
    is_worktree: bool = False,
) -> RepositoryCandidate:
    metadata_path = os.path.join(repository_path, ".git")
    return RepositoryCandidate(
        root_path=root_path,
        repository_path=repository_path,
        docs_path=os.path.join(repository_path, "docs", "project"),
        has_docs_folder=has_docs_folder,
        has_readme=has_readme and has_docs_folder,
        git=GitMetadata(
            has_metadata=True,
            is_worktree=is_worktree,
            metadata_path=metadata_path,
            metadata_kind=MetadataKind.FILE if is_worktree else MetadataKind.DIRECTORY,
        ),
    )


def _answer(value):  # type: ignore[no-untyped-def]
    if isinstance(value, BaseException):
        raise value
    return value


__all__ = [
    "FakeGitPort",
    "MemoryFileSystemPort",
    "NoBareProbeGitPort",
    "StaticDiscovery",
    "make_candidate",
]

"""Repository discovery under workspace root folders."""

from __future__ import annotations

import os
import re
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Set

from .failsafe import with_fallback
from .logging import get_logger
from .models import GitMetadata, MetadataKind, RepositoryCandidate
from .ports import FileSystemPort

DEFAULT_DOCS_PATH = os.path.join("docs", "project")
DEFAULT_README_NAME = "README.md"
GIT_METADATA_NAME = ".git"

_WORKTREE_LINK = re.compile(r"^\s*gitdir:", re.IGNORECASE | re.MULTILINE)

_LOGGER = get_logger("discovery")


def detect_git_metadata(
    fs_port: FileSystemPort,
    repository_path: str,
    metadata_name: str = GIT_METADATA_NAME,
) -> GitMetadata:
    """Classify the version-control marker inside ``repository_path``.

    A metadata directory is a primary checkout. A metadata file is a linked
    worktree when some line starts with ``gitdir:``.
    """
    metadata_path = os.path.join(repository_path, metadata_name)

    if fs_port.is_directory(metadata_path):
        return GitMetadata(
            has_metadata=True,
            is_worktree=False,
            metadata_path=metadata_path,
            metadata_kind=MetadataKind.DIRECTORY,
        )

    if fs_port.is_file(metadata_path):
        contents = with_fallback(
            lambda: fs_port.read_text(metadata_path),
            "",
            errors=(OSError, UnicodeDecodeError),
            label=f"read {metadata_path}",
        )
        return GitMetadata(
            has_metadata=True,
            is_worktree=bool(_WORKTREE_LINK.search(contents)),
            metadata_path=metadata_path,
            metadata_kind=MetadataKind.FILE,
        )

    return GitMetadata()


class DiscoveryService:
    """Finds working copies, optionally requiring a documentation folder."""

    def __init__(
        self,
        fs_port: FileSystemPort,
        *,
        docs_relative_path: str = DEFAULT_DOCS_PATH,
        nested_depth: int = 1,
        include_without_docs: bool = False,
        readme_name: str = DEFAULT_README_NAME,
        metadata_name: str = GIT_METADATA_NAME,
    ) -> None:
        if nested_depth < 0:
            raise ValueError("nested_depth must not be negative")
        self.fs_port = fs_port
        self.docs_relative_path = docs_relative_path
        self.nested_depth = nested_depth
        self.include_without_docs = include_without_docs
        self.readme_name = readme_name
        self.metadata_name = metadata_name

    def discover(
        self,
        root_paths: Iterable[str],
        *,
        include_without_docs: Optional[bool] = None,
        cancel: Optional[threading.Event] = None,
    ) -> List[RepositoryCandidate]:
        """Return candidates under ``root_paths`` sorted by repository path."""
        include = self.include_without_docs if include_without_docs is None else include_without_docs
        projects: List[RepositoryCandidate] = []
        # Nested roots reach the same folder more than once; the first root wins.
        seen: Set[str] = set()

        for root_path in _normalise_roots(root_paths):
            if cancel is not None and cancel.is_set():
                _LOGGER.info("Discovery cancelled before scanning %s", root_path)
                break

            for repository_path in self._collect_candidates(root_path):
                if repository_path in seen:
                    continue
                candidate = self._inspect(root_path, repository_path, include)
                if candidate is not None:
                    seen.add(repository_path)
                    projects.append(candidate)

        projects.sort(key=lambda candidate: candidate.repository_path)
        _LOGGER.debug("Discovered %d repositories", len(projects))
        return projects

    # ------------------------------------------------------------------
    # Internals

    def _inspect(
        self, root_path: str, repository_path: str, include_without_docs: bool
    ) -> Optional[RepositoryCandidate]:
        docs_path = os.path.join(repository_path, self.docs_relative_path)
        has_docs_folder = self.fs_port.is_directory(docs_path)

        if not has_docs_folder and not include_without_docs:
            return None

        git = detect_git_metadata(self.fs_port, repository_path, self.metadata_name)
        if not has_docs_folder and not git.has_metadata:
            return None

        has_readme = has_docs_folder and self.fs_port.is_file(
            os.path.join(docs_path, self.readme_name)
        )

        return RepositoryCandidate(
            root_path=root_path,
            repository_path=repository_path,
            docs_path=docs_path,
            has_docs_folder=has_docs_folder,
            has_readme=has_readme,
            git=git,
        )

    def _collect_candidates(self, root_path: str) -> List[str]:
        candidates: List[str] = []
        level = self._list_folders(root_path)
        depth = 0
        while level:
            candidates.extend(level)
            if depth >= self.nested_depth:
                break
            level = [nested for folder in level for nested in self._list_folders(folder)]
            depth += 1
        return sorted(set(candidates))

    def _list_folders(self, path: str) -> List[str]:
        entries = with_fallback(
            lambda: self.fs_port.read_directory(path),
            [],
            errors=(OSError,),
            label=f"list {path}",
        )
        return [entry.path for entry in entries if entry.is_directory]


def _normalise_roots(root_paths: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    roots: List[str] = []
    for raw in root_paths:
        if not raw or not str(raw).strip():
            continue
        resolved = str(Path(raw).expanduser().resolve())
        if resolved in seen:
            continue
        seen.add(resolved)
        roots.append(resolved)
    return roots


__all__ = ["DEFAULT_DOCS_PATH", "DiscoveryService", "detect_git_metadata"]

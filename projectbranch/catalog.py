"""Groups discovered worktrees into projects and resolves their display names."""

from __future__ import annotations

import json
import os
import re
import threading
import tomllib
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .discovery import DiscoveryService
from .failsafe import first_available, with_fallback
from .logging import get_logger
from .models import EnrichedWorktree, ProjectGroup, RepositoryCandidate
from .ports import BareRepositoryProbe, FileSystemPort, GitPort

_LOGGER = get_logger("catalog")

PREFERRED_REMOTE = "origin"

_README_TITLE = re.compile(r"^#[ \t]+(.+?)[ \t]*$", re.MULTILINE)
_CLOSING_HASHES = re.compile(r"\s+#*\s*$")
_REMOTE_TAIL = re.compile(r"([^/:]+?)(?:\.git)?$", re.IGNORECASE)
_GENERIC_FOLDER_NAMES = frozenset({"src", "repo", "code", "workspace"})


@dataclass(frozen=True)
class BranchConventions:
    """Conventional branch names used only as tie-break signals."""

    primary: str = "main"
    secondary: str = "master"


RankPredicate = Callable[[EnrichedWorktree, BranchConventions], bool]

# Order matters: the first matching predicate gives the rank, lower wins.
DEFAULT_WORKTREE_RANKS: Tuple[Tuple[int, RankPredicate], ...] = (
    (0, lambda wt, br: wt.has_readme and wt.branch_name == br.primary),
    (1, lambda wt, br: wt.has_readme),
    (2, lambda wt, br: wt.has_docs_folder and wt.branch_name == br.primary),
    (3, lambda wt, br: wt.has_docs_folder),
    (4, lambda wt, br: wt.branch_name == br.primary),
    (5, lambda wt, br: not wt.git.is_worktree),
    (6, lambda wt, br: wt.branch_name == br.secondary),
)
FALLBACK_RANK = 7


def default_worktree_rank(
    worktree: EnrichedWorktree, branches: BranchConventions = BranchConventions()
) -> int:
    """Return the election rank for ``worktree``; lower ranks are preferred."""
    for rank, predicate in DEFAULT_WORKTREE_RANKS:
        if predicate(worktree, branches):
            return rank
    return FALLBACK_RANK


def pick_default_worktree(
    worktrees: Sequence[EnrichedWorktree],
    branches: BranchConventions = BranchConventions(),
) -> EnrichedWorktree:
    """Elect the worktree a user most likely wants to open; ties break on path."""
    if not worktrees:
        raise ValueError("Cannot elect a default from an empty worktree list")
    return min(
        worktrees,
        key=lambda wt: (default_worktree_rank(wt, branches), wt.repository_path),
    )


def normalize_identity_path(
    identity_path: str | None,
    fallback_path: str,
    *,
    metadata_dir_names: Sequence[str] = (".git",),
    bare_marker_names: Sequence[str] = (".bare",),
) -> str:
    """Turn a shared git directory into the folder a user would recognise.

    ``/work/repo/.git`` and ``/work/repo/.bare`` both become ``/work/repo``;
    any other hidden trailing segment is promoted to its parent as well.
    """
    candidate = (identity_path or "").strip()
    if not candidate:
        return fallback_path

    trimmed = candidate.rstrip("/\\")
    if not trimmed:
        return fallback_path

    markers = set(metadata_dir_names) | set(bare_marker_names)
    base_name = _basename(trimmed)
    if base_name in markers or base_name.startswith("."):
        head = trimmed[: len(trimmed) - len(base_name)]
        # A marker directly under the filesystem root keeps the root itself.
        parent = head.rstrip("/\\") or head[:1]
        return parent if parent and parent != "." else fallback_path

    return trimmed


def normalize_display_name(candidate: object) -> Optional[str]:
    """Collapse whitespace runs; empty results count as no name."""
    if candidate is None:
        return None
    compact = " ".join(str(candidate).split())
    return compact or None


def parse_readme_title(contents: str | None) -> Optional[str]:
    """Return the first level-1 markdown heading in ``contents``."""
    if not contents:
        return None
    match = _README_TITLE.search(contents.replace("\r\n", "\n"))
    if not match:
        return None
    return normalize_display_name(_CLOSING_HASHES.sub("", match.group(1)))


def parse_manifest_name(file_name: str, contents: str | None) -> Optional[str]:
    """Extract the declared project name from a package manifest."""
    if not contents:
        return None
    try:
        if file_name.endswith(".json"):
            data = json.loads(contents)
            return _string_name(data.get("name") if isinstance(data, dict) else None)
        if file_name.endswith(".toml"):
            data = tomllib.loads(contents)
            for table, nested in (("project", None), ("package", None), ("tool", "poetry")):
                section = data.get(table)
                if nested and isinstance(section, dict):
                    section = section.get(nested)
                if isinstance(section, dict):
                    name = _string_name(section.get("name"))
                    if name:
                        return name
    except (ValueError, tomllib.TOMLDecodeError):
        return None
    return None


def parse_remote_name(remote_url: str | None) -> Optional[str]:
    """Return the repository segment of a remote URL without its ``.git`` suffix."""
    if not remote_url:
        return None
    match = _REMOTE_TAIL.search(remote_url.strip())
    if not match:
        return None
    return normalize_display_name(match.group(1))


def display_name_from_path(
    project_path: str | None,
    generic_names: Iterable[str] = (),
) -> Optional[str]:
    """Name a project after its folder, qualified by the parent when too generic."""
    normalised = (project_path or "").rstrip("/\\")
    base_name = _basename(normalised)
    if not base_name:
        return normalize_display_name(normalised)

    generic = _GENERIC_FOLDER_NAMES | set(generic_names)
    parent = _basename(normalised[: len(normalised) - len(base_name)].rstrip("/\\"))
    if base_name.lower() in generic and parent:
        return normalize_display_name(f"{parent}/{base_name}")
    return normalize_display_name(base_name)


class ProjectCatalogService:
    """Aggregates discovery results into project groups."""

    def __init__(
        self,
        discovery_service: DiscoveryService,
        git_port: GitPort,
        fs_port: FileSystemPort | None = None,
        *,
        branches: BranchConventions = BranchConventions(),
        metadata_dir_names: Sequence[str] = (".git",),
        bare_marker_names: Sequence[str] = (".bare",),
        manifest_files: Sequence[str] = ("package.json", "pyproject.toml", "Cargo.toml"),
        readme_name: str = "README.md",
        max_workers: int = 8,
    ) -> None:
        self.discovery_service = discovery_service
        self.git_port = git_port
        self.fs_port = fs_port
        self.branches = branches
        self.metadata_dir_names = tuple(metadata_dir_names)
        self.bare_marker_names = tuple(bare_marker_names)
        self.manifest_files = tuple(manifest_files)
        self.readme_name = readme_name
        self.max_workers = max_workers

    def discover_grouped(
        self,
        root_paths: Iterable[str],
        *,
        cancel: Optional[threading.Event] = None,
    ) -> List[ProjectGroup]:
        """Discover repositories under ``root_paths`` and return sorted project groups."""
        discovered = self.discovery_service.discover(
            root_paths, include_without_docs=True, cancel=cancel
        )

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            enriched = self._enrich(executor, discovered)

            grouped: Dict[str, List[EnrichedWorktree]] = {}
            for worktree in enriched:
                if worktree.is_bare_repository:
                    _LOGGER.debug("Skipping bare repository %s", worktree.repository_path)
                    continue
                grouped.setdefault(worktree.repository_identity, []).append(worktree)

            groups = list(
                executor.map(lambda item: self._build_group(*item), grouped.items())
            )

        groups.sort(key=lambda group: (not group.has_docs_folder, group.project_path, group.project_id))
        _LOGGER.info(
            "Catalogued %d project(s) from %d worktree(s)", len(groups), len(discovered)
        )
        return groups

    def resolve_display_name(
        self, default_worktree: RepositoryCandidate, project_path: str | None
    ) -> str:
        """Name a project from its README, manifest, remote, then its path."""
        name = first_available(
            (
                lambda: self._readme_title(default_worktree),
                lambda: self._manifest_name(default_worktree),
                lambda: self._remote_name(default_worktree),
            ),
            label=f"display name for {default_worktree.repository_path}",
        )
        if name:
            return name

        generic = (self.branches.primary, self.branches.secondary)
        return (
            display_name_from_path(project_path or default_worktree.repository_path, generic)
            or default_worktree.repository_path
        )

    # ------------------------------------------------------------------
    # Internals

    def _enrich(
        self, executor: ThreadPoolExecutor, discovered: Sequence[RepositoryCandidate]
    ) -> List[EnrichedWorktree]:
        probe = self.git_port if isinstance(self.git_port, BareRepositoryProbe) else None
        pending: List[Tuple[RepositoryCandidate, Future, Future, Optional[Future]]] = []

        for entry in discovered:
            path = entry.repository_path
            branch = executor.submit(
                with_fallback,
                lambda path=path: self.git_port.get_current_branch(path) or None,
                None,
                label=f"current branch of {path}",
            )
            common = executor.submit(
                with_fallback,
                lambda path=path: self.git_port.get_common_directory(path),
                path,
                label=f"common directory of {path}",
            )
            bare = None
            if probe is not None:
                bare = executor.submit(
                    with_fallback,
                    lambda path=path: bool(probe.is_bare_repository(path)),
                    False,
                    label=f"bare check of {path}",
                )
            pending.append((entry, branch, common, bare))

        enriched: List[EnrichedWorktree] = []
        for entry, branch, common, bare in pending:
            enriched.append(
                EnrichedWorktree(
                    root_path=entry.root_path,
                    repository_path=entry.repository_path,
                    docs_path=entry.docs_path,
                    has_docs_folder=entry.has_docs_folder,
                    has_readme=entry.has_readme,
                    git=entry.git,
                    branch_name=branch.result(),
                    repository_identity=common.result() or entry.repository_path,
                    is_bare_repository=bare.result() if bare is not None else False,
                )
            )
        return enriched

    def _build_group(
        self, repository_identity: str, worktrees: List[EnrichedWorktree]
    ) -> ProjectGroup:
        ordered = sorted(worktrees, key=lambda wt: wt.repository_path)
        default = pick_default_worktree(ordered, self.branches)
        project_path = normalize_identity_path(
            repository_identity,
            default.repository_path,
            metadata_dir_names=self.metadata_dir_names,
            bare_marker_names=self.bare_marker_names,
        )
        display_name = self.resolve_display_name(default, project_path)

        return ProjectGroup(
            project_id=repository_identity,
            display_name=display_name,
            project_path=project_path,
            root_path=default.root_path,
            default_worktree_path=default.repository_path,
            has_docs_folder=any(wt.has_docs_folder for wt in ordered),
            has_readme=any(wt.has_readme for wt in ordered),
            worktrees=tuple(
                replace(wt, is_default=wt.repository_path == default.repository_path)
                for wt in ordered
            ),
        )

    def _readme_title(self, worktree: RepositoryCandidate) -> Optional[str]:
        if self.fs_port is None or not worktree.has_readme:
            return None
        readme_path = os.path.join(worktree.docs_path, self.readme_name)
        if not self.fs_port.is_file(readme_path):
            return None
        return parse_readme_title(self.fs_port.read_text(readme_path))

    def _manifest_name(self, worktree: RepositoryCandidate) -> Optional[str]:
        if self.fs_port is None:
            return None
        for file_name in self.manifest_files:
            manifest_path = os.path.join(worktree.repository_path, file_name)
            if not self.fs_port.is_file(manifest_path):
                continue
            name = with_fallback(
                lambda: parse_manifest_name(file_name, self.fs_port.read_text(manifest_path)),
                None,
                label=f"manifest {manifest_path}",
            )
            if name:
                return name
        return None

    def _remote_name(self, worktree: RepositoryCandidate) -> Optional[str]:
        remotes = self.git_port.get_remotes(worktree.repository_path)
        if not remotes:
            return None
        preferred = next(
            (remote for remote in remotes if remote.name == PREFERRED_REMOTE), remotes[0]
        )
        return parse_remote_name(preferred.url)


def _basename(path: str) -> str:
    return re.split(r"[\\/]", path)[-1] if path else ""


def _string_name(value: object) -> Optional[str]:
    return normalize_display_name(value) if isinstance(value, str) else None


__all__ = [
    "BranchConventions",
    "DEFAULT_WORKTREE_RANKS",
    "ProjectCatalogService",
    "default_worktree_rank",
    "display_name_from_path",
    "normalize_display_name",
    "normalize_identity_path",
    "parse_manifest_name",
    "parse_readme_title",
    "parse_remote_name",
    "pick_default_worktree",
]

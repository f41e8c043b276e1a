"""Tests for projectbranch.discovery."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import List

import pytest

from projectbranch.discovery import DiscoveryService, detect_git_metadata
from projectbranch.fs import LocalFileSystemPort
from projectbranch.models import DirectoryEntry, MetadataKind
from tests._fixtures.workspace_builder import WorkspaceBuilder


def _paths(candidates) -> List[str]:  # type: ignore[no-untyped-def]
    return [candidate.repository_path for candidate in candidates]


def test_discover_finds_docs_in_direct_and_nested_folders(workspace: WorkspaceBuilder) -> None:
    alpha = workspace.repo("repo-alpha", readme="# Alpha\n")
    nested = workspace.repo("grouped/repo-nested", git="worktree")
    workspace.repo("repo-no-docs", docs=False)
    workspace.repo("deep/er/repo-too-deep")

    service = DiscoveryService(LocalFileSystemPort(), nested_depth=1)
    projects = service.discover([str(workspace.root)])

    assert _paths(projects) == [str(nested), str(alpha)]
    assert all(project.has_docs_folder for project in projects)

    nested_project = projects[0]
    assert nested_project.git.has_metadata is True
    assert nested_project.git.is_worktree is True
    assert nested_project.git.metadata_kind is MetadataKind.FILE
    assert nested_project.root_path == str(workspace.root)
    assert nested_project.docs_path == str(nested / "docs" / "project")


def test_discover_can_include_git_repositories_without_docs(workspace: WorkspaceBuilder) -> None:
    workspace.repo("repo-alpha")
    no_docs = workspace.repo("repo-no-docs", docs=False)
    workspace.folder("plain-folder")

    service = DiscoveryService(LocalFileSystemPort(), include_without_docs=True)
    projects = service.discover([str(workspace.root)])

    assert len(projects) == 2
    without_docs = next(p for p in projects if p.repository_path == str(no_docs))
    assert without_docs.has_docs_folder is False
    assert without_docs.has_readme is False
    assert without_docs.git.metadata_kind is MetadataKind.DIRECTORY


def test_discover_keeps_docs_folder_without_git_metadata(workspace: WorkspaceBuilder) -> None:
    plain = workspace.repo("notes", git=None)

    projects = DiscoveryService(LocalFileSystemPort()).discover([str(workspace.root)])

    assert _paths(projects) == [str(plain)]
    assert projects[0].git.has_metadata is False
    assert projects[0].git.metadata_path is None


def test_readme_requires_docs_folder(workspace: WorkspaceBuilder) -> None:
    workspace.repo("with-readme")
    workspace.repo("docs-only", readme=None)

    projects = DiscoveryService(LocalFileSystemPort()).discover([str(workspace.root)])
    readmes = {Path(p.repository_path).name: p.has_readme for p in projects}

    assert readmes == {"docs-only": False, "with-readme": True}


def test_nested_depth_zero_only_checks_direct_folders(workspace: WorkspaceBuilder) -> None:
    direct = workspace.repo("direct")
    workspace.repo("group/nested")

    projects = DiscoveryService(LocalFileSystemPort(), nested_depth=0).discover(
        [str(workspace.root)]
    )

    assert _paths(projects) == [str(direct)]


def test_nested_depth_two_reaches_one_level_further(workspace: WorkspaceBuilder) -> None:
    deep = workspace.repo("a/b/deep")

    projects = DiscoveryService(LocalFileSystemPort(), nested_depth=2).discover(
        [str(workspace.root)]
    )

    assert _paths(projects) == [str(deep)]


def test_discover_is_deterministic_and_deduplicates_roots(workspace: WorkspaceBuilder) -> None:
    for name in ("zeta", "alpha", "mid/beta", "mid/aardvark"):
        workspace.repo(name)

    service = DiscoveryService(LocalFileSystemPort())
    root = str(workspace.root)
    first = service.discover([root, "", root, f"{root}/"])
    second = service.discover([root])

    assert first == second
    assert _paths(first) == sorted(_paths(first))
    assert len(first) == 4


def test_discover_tolerates_listing_failures(workspace: WorkspaceBuilder) -> None:
    visible = workspace.repo("visible")
    locked = workspace.folder("locked")
    workspace.repo("locked/hidden")

    class FlakyPort(LocalFileSystemPort):
        def read_directory(self, path: str) -> List[DirectoryEntry]:
            if path == str(locked):
                raise PermissionError(path)
            return super().read_directory(path)

    projects = DiscoveryService(FlakyPort()).discover(
        [str(workspace.root), str(workspace.root / "missing-root")]
    )

    assert _paths(projects) == [str(visible)]


def test_discover_propagates_programming_errors(workspace: WorkspaceBuilder) -> None:
    workspace.repo("repo")

    class BrokenPort(LocalFileSystemPort):
        def read_directory(self, path: str) -> List[DirectoryEntry]:
            raise TypeError("bad adapter")

    with pytest.raises(TypeError):
        DiscoveryService(BrokenPort()).discover([str(workspace.root)])


def test_metadata_is_not_probed_when_docs_are_missing(workspace: WorkspaceBuilder) -> None:
    workspace.repo("no-docs", docs=False)
    probed: List[str] = []

    class RecordingPort(LocalFileSystemPort):
        def is_file(self, path: str) -> bool:
            probed.append(path)
            return super().is_file(path)

        def is_directory(self, path: str) -> bool:
            probed.append(path)
            return super().is_directory(path)

    projects = DiscoveryService(RecordingPort()).discover([str(workspace.root)])

    assert projects == []
    assert not [path for path in probed if path.endswith(".git")]


def test_cancelled_discovery_stops_before_scanning(workspace: WorkspaceBuilder) -> None:
    workspace.repo("repo")
    cancel = threading.Event()
    cancel.set()

    projects = DiscoveryService(LocalFileSystemPort()).discover(
        [str(workspace.root)], cancel=cancel
    )

    assert projects == []


def test_negative_depth_is_rejected() -> None:
    with pytest.raises(ValueError):
        DiscoveryService(LocalFileSystemPort(), nested_depth=-1)


@pytest.mark.parametrize(
    "contents",
    [
        "gitdir: /repo/.git/worktrees/feature\n",
        "GITDIR: /repo/.git/worktrees/feature\n",
        "# linked checkout\n   GitDir: /repo/.git/worktrees/feature\n",
    ],
)
def test_worktree_link_file_is_detected(tmp_path: Path, contents: str) -> None:
    (tmp_path / ".git").write_text(contents, encoding="utf-8")

    metadata = detect_git_metadata(LocalFileSystemPort(), str(tmp_path))

    assert metadata.has_metadata is True
    assert metadata.is_worktree is True
    assert metadata.metadata_path == str(tmp_path / ".git")


def test_git_file_without_link_is_not_a_worktree(tmp_path: Path) -> None:
    (tmp_path / ".git").write_text("something else: gitdir: nope\n", encoding="utf-8")

    metadata = detect_git_metadata(LocalFileSystemPort(), str(tmp_path))

    assert metadata.has_metadata is True
    assert metadata.is_worktree is False


def test_git_directory_is_never_a_worktree(tmp_path: Path) -> None:
    git_dir = tmp_path / ".git"
    git_dir.mkdir()
    (git_dir / "gitdir").write_text("gitdir: /elsewhere\n", encoding="utf-8")

    metadata = detect_git_metadata(LocalFileSystemPort(), str(tmp_path))

    assert metadata.metadata_kind is MetadataKind.DIRECTORY
    assert metadata.is_worktree is False


def test_unreadable_git_file_still_counts_as_metadata(tmp_path: Path) -> None:
    (tmp_path / ".git").write_bytes(b"\xff\xfe\x00gitdir")

    metadata = detect_git_metadata(LocalFileSystemPort(), str(tmp_path))

    assert metadata.has_metadata is True
    assert metadata.is_worktree is False


def test_overlapping_roots_report_each_folder_once(workspace: WorkspaceBuilder) -> None:
    top = workspace.repo("repo-a")
    nested = workspace.repo("grouped/repo-b", git="worktree")
    grouped_root = workspace.root / "grouped"

    projects = DiscoveryService(LocalFileSystemPort()).discover(
        [str(grouped_root), str(workspace.root)]
    )

    assert _paths(projects) == [str(nested), str(top)]
    assert projects[0].root_path == str(grouped_root)
    assert projects[1].root_path == str(workspace.root)

"""Wires ports and services together for the CLI and service entrypoints."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .branches import BranchService
from .catalog import BranchConventions, ProjectCatalogService
from .config import ProjectBranchConfig, load_config
from .discovery import DiscoveryService
from .documents import DocumentService
from .fs import LocalFileSystemPort
from .git.remotes import map_local_to_hosted
from .git.shell import GitShellPort
from .github import GitHubSessionService, StaticGitHubPort
from .logging import get_logger
from .models import (
    AccessibleRepository,
    BranchContext,
    ProjectGroup,
    RemoteMappingResult,
    RepositoryCandidate,
)
from .ports import FileSystemPort, GitHubPort, GitPort


class Orchestrator:
    """Single entrypoint owning one filesystem port and one git port."""

    def __init__(
        self,
        config: ProjectBranchConfig | None = None,
        *,
        fs_port: FileSystemPort | None = None,
        git_port: GitPort | None = None,
        github_port: GitHubPort | None = None,
    ) -> None:
        self.config = config or load_config(Path.cwd())
        self.logger = get_logger("orchestrator")
        self.fs_port = fs_port or LocalFileSystemPort()
        self.git_port = git_port or GitShellPort(
            binary=self.config.git.binary, timeout=self.config.git.timeout
        )

        discovery = self.config.discovery
        catalog = self.config.catalog
        self.discovery_service = DiscoveryService(
            self.fs_port,
            docs_relative_path=discovery.docs_path,
            nested_depth=discovery.nested_depth,
            include_without_docs=discovery.include_without_docs,
            readme_name=discovery.readme_name,
        )
        self.catalog_service = ProjectCatalogService(
            self.discovery_service,
            self.git_port,
            self.fs_port,
            branches=BranchConventions(
                primary=catalog.primary_branch, secondary=catalog.secondary_branch
            ),
            metadata_dir_names=catalog.metadata_dir_names,
            bare_marker_names=catalog.bare_marker_names,
            manifest_files=catalog.manifest_files,
            readme_name=discovery.readme_name,
            max_workers=catalog.max_workers,
        )
        self.branch_service = BranchService(self.git_port)
        self.document_service = DocumentService(
            self.fs_port, default_file_name=discovery.readme_name
        )
        self.github_session = GitHubSessionService(
            github_port
            or StaticGitHubPort(self.config.github.accessible_repositories)
        )

    def resolve_roots(self, root_paths: Iterable[str] | None) -> List[str]:
        roots = [path for path in (root_paths or []) if path]
        if roots:
            return roots
        if self.config.roots:
            return list(self.config.roots)
        raise ValueError("No workspace roots given and none configured in .projectbranch.yml")

    def discover(
        self,
        root_paths: Iterable[str] | None = None,
        *,
        include_without_docs: Optional[bool] = None,
        cancel: Optional[threading.Event] = None,
    ) -> List[RepositoryCandidate]:
        roots = self.resolve_roots(root_paths)
        self.logger.info("Scanning %d root(s)", len(roots))
        return self.discovery_service.discover(
            roots, include_without_docs=include_without_docs, cancel=cancel
        )

    def catalog(
        self,
        root_paths: Iterable[str] | None = None,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> List[ProjectGroup]:
        roots = self.resolve_roots(root_paths)
        return self.catalog_service.discover_grouped(roots, cancel=cancel)

    def map_repository(
        self,
        repository_path: str,
        accessible: Sequence[str] | None = None,
    ) -> RemoteMappingResult:
        """Map a working copy onto a hosted repository.

        ``accessible`` overrides the configured list; an empty list disables the
        accessibility check.
        """
        remotes = self.branch_service.get_remotes(repository_path)
        if accessible is None:
            repositories = self.github_session.login_and_list_repositories()
        else:
            repositories = [AccessibleRepository(full_name=name) for name in accessible]
        return map_local_to_hosted(
            remotes, repositories, host=self.config.github.host
        )

    def branch_context(self, repository_path: str) -> BranchContext:
        return self.branch_service.get_context(repository_path)

    def switch_branch(self, repository_path: str, branch_name: str) -> BranchContext:
        return self.branch_service.switch(repository_path, branch_name)

    def read_document(self, docs_path: str, file_name: str | None = None) -> str:
        return self.document_service.read(docs_path, file_name)

    def write_document(
        self, docs_path: str, contents: str, file_name: str | None = None
    ) -> str:
        return self.document_service.write(docs_path, contents, file_name)

    def append_document(
        self, docs_path: str, text: str, file_name: str | None = None
    ) -> str:
        return self.document_service.append(docs_path, text, file_name)


__all__ = ["Orchestrator"]

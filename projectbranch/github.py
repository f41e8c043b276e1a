"""Hosting-provider session handling without network access."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .models import AccessibleRepository
from .ports import GitHubPort


class GitHubLoginRequired(RuntimeError):
    """Raised when repositories are listed before logging in."""


class StaticGitHubPort:
    """Serves a fixed list of accessible repositories, typically from configuration."""

    def __init__(self, full_names: Iterable[str] = ()) -> None:
        self._repositories: List[AccessibleRepository] = [
            AccessibleRepository(full_name=name) for name in full_names if name
        ]
        self._logged_in = False

    def login(self) -> None:
        self._logged_in = True

    def list_accessible_repositories(self) -> Sequence[AccessibleRepository]:
        if not self._logged_in:
            raise GitHubLoginRequired("Login required before listing repositories")
        return list(self._repositories)


class GitHubSessionService:
    def __init__(self, github_port: GitHubPort) -> None:
        self.github_port = github_port

    def login_and_list_repositories(self) -> List[AccessibleRepository]:
        self.github_port.login()
        return list(self.github_port.list_accessible_repositories())


__all__ = ["GitHubLoginRequired", "GitHubSessionService", "StaticGitHubPort"]

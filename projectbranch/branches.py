"""Branch inspection and switching for a single working copy."""

from __future__ import annotations

from typing import List

from .logging import get_logger
from .models import BranchContext, GitBranch, GitRemote
from .ports import GitPort

_LOGGER = get_logger("branches")


class BranchService:
    """Caller-directed branch operations; git failures propagate."""

    def __init__(self, git_port: GitPort) -> None:
        self.git_port = git_port

    def get_context(self, repository_path: str) -> BranchContext:
        active_branch = self.git_port.get_current_branch(repository_path)
        branches = self.git_port.list_branches(repository_path)
        return BranchContext(
            active_branch=active_branch,
            branches=tuple(
                GitBranch(name=branch.name, is_current=branch.name == active_branch)
                for branch in branches
            ),
        )

    def switch(self, repository_path: str, branch_name: str) -> BranchContext:
        _LOGGER.info("Switching %s to %s", repository_path, branch_name)
        self.git_port.switch_branch(repository_path, branch_name)
        return self.get_context(repository_path)

    def get_remotes(self, repository_path: str) -> List[GitRemote]:
        return list(self.git_port.get_remotes(repository_path))


__all__ = ["BranchService"]

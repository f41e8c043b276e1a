"""Helper utilities for constructing temporary workspaces in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping, Optional


class WorkspaceBuilder:
    """Writes repository-shaped folders under a throwaway workspace root."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = (tmp_path / "workspace").resolve()
        self.root.mkdir()

    def repo(
        self,
        relative: str,
        *,
        docs: bool = True,
        readme: Optional[str] = "# Project\n",
        git: Optional[str] = "directory",
        gitdir: str = "/elsewhere/.git/worktrees/repo",
        files: Mapping[str, str] | None = None,
    ) -> Path:
        """Create a repository folder.

        ``git`` is ``"directory"`` for a primary checkout, ``"worktree"`` for a
        ``.git`` file pointing at ``gitdir``, or ``None`` for no metadata.
        """
        path = self.root / relative
        path.mkdir(parents=True, exist_ok=True)
        if docs:
            docs_path = path / "docs" / "project"
            docs_path.mkdir(parents=True, exist_ok=True)
            if readme is not None:
                (docs_path / "README.md").write_text(readme, encoding="utf-8")
        if git == "directory":
            (path / ".git").mkdir(exist_ok=True)
        elif git == "worktree":
            (path / ".git").write_text(f"gitdir: {gitdir}\n", encoding="utf-8")
        self.write(relative, files or {})
        return path

    def folder(self, relative: str) -> Path:
        path = self.root / relative
        path.mkdir(parents=True, exist_ok=True)
        return path

    def write(self, relative: str, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries below ``relative``."""
        for name, content in files.items():
            target = self.root / relative / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")


__all__ = ["WorkspaceBuilder"]

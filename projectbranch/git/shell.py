"""Git port implemented by shelling out to the git binary."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..logging import get_logger
from ..models import GitBranch, GitRemote

_LOGGER = get_logger("git")


class GitCommandError(RuntimeError):
    """Raised when the git binary is missing, exits non-zero or times out."""

    def __init__(self, args: Iterable[str], message: str) -> None:
        self.command = list(args)
        super().__init__(f"{' '.join(self.command)}: {message}")


class GitShellPort:
    """Answers version-control queries with ``git -C <repo> ...`` invocations."""

    def __init__(
        self,
        runner: Callable[..., str] | None = None,
        *,
        binary: str = "git",
        timeout: Optional[float] = 10.0,
    ) -> None:
        self._runner = runner or self._default_runner
        self._binary = binary
        self._timeout = timeout

    def get_current_branch(self, repo_path: str) -> str:
        return self._git(repo_path, "branch", "--show-current")

    def list_branches(self, repo_path: str) -> List[GitBranch]:
        output = self._git(repo_path, "branch", "--format", "%(refname:short)|%(HEAD)")
        branches: List[GitBranch] = []
        for line in output.splitlines():
            if not line.strip():
                continue
            name, _, head_flag = line.partition("|")
            branches.append(GitBranch(name=name.strip(), is_current=head_flag.strip() == "*"))
        return branches

    def switch_branch(self, repo_path: str, name: str) -> None:
        self._git(repo_path, "checkout", name)

    def get_remotes(self, repo_path: str) -> List[GitRemote]:
        output = self._git(repo_path, "remote", "-v")
        seen: set[str] = set()
        remotes: List[GitRemote] = []
        for line in output.splitlines():
            parts = line.split()
            if len(parts) < 3 or "(fetch)" not in parts[2]:
                continue
            name, url = parts[0], parts[1]
            if name in seen:
                continue
            seen.add(name)
            remotes.append(GitRemote(name=name, url=url))
        return remotes

    def get_common_directory(self, repo_path: str) -> str:
        output = self._git(repo_path, "rev-parse", "--git-common-dir")
        if not output:
            return repo_path
        common = Path(output)
        if not common.is_absolute():
            common = Path(repo_path) / common
        return str(common.resolve())

    def is_bare_repository(self, repo_path: str) -> bool:
        return self._git(repo_path, "rev-parse", "--is-bare-repository") == "true"

    # ------------------------------------------------------------------
    # Internals

    def _git(self, repo_path: str, *args: str) -> str:
        command = [self._binary, "-C", repo_path, *args]
        _LOGGER.debug("Running %s", " ".join(command))
        output = self._runner(
            command,
            cwd=Path(repo_path),
            capture_output=True,
            timeout=self._timeout,
        )
        return output.strip()

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
        timeout: Optional[float] = None,
    ) -> str:
        command = list(args)
        env = os.environ.copy()
        # Stable, non-interactive output regardless of the user's locale.
        env.setdefault("LC_ALL", "C")
        env["GIT_TERMINAL_PROMPT"] = "0"
        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd),
                env=env,
                check=True,
                text=True,
                capture_output=capture_output,
                timeout=timeout,
            )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise GitCommandError(command, detail) from exc
        except subprocess.TimeoutExpired as exc:
            raise GitCommandError(command, f"timed out after {timeout}s") from exc
        except OSError as exc:
            raise GitCommandError(command, str(exc)) from exc
        return completed.stdout if capture_output else ""


__all__ = ["GitCommandError", "GitShellPort"]

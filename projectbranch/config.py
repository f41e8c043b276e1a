"""Configuration loading for projectbranch (.projectbranch.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

CONFIG_FILENAME = ".projectbranch.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class DiscoveryConfig:
    """Where documentation lives and how deep to look for repositories."""

    docs_path: str = os.path.join("docs", "project")
    nested_depth: int = 1
    include_without_docs: bool = False
    readme_name: str = "README.md"


@dataclass
class CatalogConfig:
    """Heuristics used when grouping worktrees into projects."""

    primary_branch: str = "main"
    secondary_branch: str = "master"
    metadata_dir_names: Tuple[str, ...] = (".git",)
    bare_marker_names: Tuple[str, ...] = (".bare",)
    manifest_files: Tuple[str, ...] = ("package.json", "pyproject.toml", "Cargo.toml")
    max_workers: int = 8


@dataclass
class GitConfig:
    """How the git binary is invoked."""

    binary: str = "git"
    timeout: Optional[float] = 10.0


@dataclass
class GitHubConfig:
    """Hosted-provider settings used for remote mapping."""

    host: str = "github.com"
    accessible_repositories: List[str] = field(default_factory=list)


@dataclass
class ProjectBranchConfig:
    """Represents the settings defined in .projectbranch.yml."""

    root: Path
    roots: List[str] = field(default_factory=list)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    git: GitConfig = field(default_factory=GitConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)


def load_config(config_path: Path) -> ProjectBranchConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ProjectBranchConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    roots = [str(Path(item).expanduser()) for item in _as_str_list(data.get("roots"))]

    discovery = DiscoveryConfig()
    discovery_data = _as_dict(data.get("discovery"))
    if discovery_data:
        discovery.docs_path = _as_str(discovery_data.get("docs_path")) or discovery.docs_path
        nested_depth = _as_int(discovery_data.get("nested_depth"))
        if nested_depth is not None:
            if nested_depth < 0:
                raise ConfigError("discovery.nested_depth must not be negative")
            discovery.nested_depth = nested_depth
        include = _as_bool(discovery_data.get("include_without_docs"))
        if include is not None:
            discovery.include_without_docs = include
        discovery.readme_name = (
            _as_str(discovery_data.get("readme_name")) or discovery.readme_name
        )

    catalog = CatalogConfig()
    catalog_data = _as_dict(data.get("catalog"))
    if catalog_data:
        catalog.primary_branch = (
            _as_str(catalog_data.get("primary_branch")) or catalog.primary_branch
        )
        catalog.secondary_branch = (
            _as_str(catalog_data.get("secondary_branch")) or catalog.secondary_branch
        )
        for key in ("metadata_dir_names", "bare_marker_names", "manifest_files"):
            if key in catalog_data:
                setattr(catalog, key, tuple(_as_str_list(catalog_data.get(key))))
        max_workers = _as_int(catalog_data.get("max_workers"))
        if max_workers is not None:
            if max_workers < 1:
                raise ConfigError("catalog.max_workers must be at least 1")
            catalog.max_workers = max_workers

    git = GitConfig()
    git_data = _as_dict(data.get("git"))
    if git_data:
        git.binary = _as_str(git_data.get("binary")) or git.binary
        if "timeout" in git_data:
            git.timeout = _as_float(git_data.get("timeout"))

    github = GitHubConfig()
    github_data = _as_dict(data.get("github"))
    if github_data:
        github.host = _as_str(github_data.get("host")) or github.host
        github.accessible_repositories = _as_str_list(
            github_data.get("accessible_repositories")
        )

    return ProjectBranchConfig(
        root=root,
        roots=roots,
        discovery=discovery,
        catalog=catalog,
        git=git,
        github=github,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CatalogConfig",
    "ConfigError",
    "DiscoveryConfig",
    "GitConfig",
    "GitHubConfig",
    "ProjectBranchConfig",
    "load_config",
]

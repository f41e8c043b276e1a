"""CLI entrypoints for projectbranch commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .config import ConfigError, load_config
from .git.shell import GitCommandError
from .logging import configure_logging
from .orchestrator import Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_roots_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "roots",
        nargs="*",
        help="Workspace root folders to scan (defaults to `roots` in .projectbranch.yml).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projectbranch",
        description="Catalog git repositories and worktrees that carry project documentation.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .projectbranch.yml or its directory (defaults to the current directory).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    discover_parser = subparsers.add_parser(
        "discover",
        help="List repositories that carry a documentation folder.",
    )
    _add_verbose_option(discover_parser, suppress_default=True)
    _add_roots_argument(discover_parser)
    discover_parser.add_argument(
        "--include-without-docs",
        action="store_true",
        default=None,
        help="Also list git repositories without a documentation folder.",
    )
    discover_parser.add_argument(
        "--depth",
        type=int,
        default=None,
        help="How many folder levels below each root folder to inspect.",
    )
    discover_parser.add_argument(
        "--docs-path",
        default=None,
        help="Documentation folder relative to each repository.",
    )

    catalog_parser = subparsers.add_parser(
        "catalog",
        help="Group worktrees into projects and resolve their names.",
    )
    _add_verbose_option(catalog_parser, suppress_default=True)
    _add_roots_argument(catalog_parser)

    map_parser = subparsers.add_parser(
        "map",
        help="Map a local repository onto its hosted GitHub repository.",
    )
    _add_verbose_option(map_parser, suppress_default=True)
    map_parser.add_argument("repository", help="Path to the working copy.")
    map_parser.add_argument(
        "--accessible",
        action="append",
        default=None,
        metavar="OWNER/REPO",
        help="Repository the account can access (repeatable; overrides configuration).",
    )

    branches_parser = subparsers.add_parser(
        "branches",
        help="Show the active branch and local branches of a working copy.",
    )
    _add_verbose_option(branches_parser, suppress_default=True)
    branches_parser.add_argument("repository", help="Path to the working copy.")

    switch_parser = subparsers.add_parser(
        "switch",
        help="Check out another local branch.",
    )
    _add_verbose_option(switch_parser, suppress_default=True)
    switch_parser.add_argument("repository", help="Path to the working copy.")
    switch_parser.add_argument("branch", help="Branch to check out.")

    docs_parser = subparsers.add_parser(
        "docs",
        help="Read or append to a project document.",
    )
    _add_verbose_option(docs_parser, suppress_default=True)
    docs_subparsers = docs_parser.add_subparsers(dest="docs_command", required=True)
    read_parser = docs_subparsers.add_parser("read", help="Print a document.")
    read_parser.add_argument("docs_path", help="Documentation folder.")
    read_parser.add_argument("--file", default=None, help="Document file name.")
    append_parser = docs_subparsers.add_parser("append", help="Append text to a document.")
    append_parser.add_argument("docs_path", help="Documentation folder.")
    append_parser.add_argument("text", help="Text to append.")
    append_parser.add_argument("--file", default=None, help="Document file name.")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for projectbranch commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose), quiet=args.quiet, log_file=args.log_file
    )

    try:
        config = load_config(Path(args.config) if args.config else Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "discover":
        if args.depth is not None:
            if args.depth < 0:
                parser.exit(1, "--depth must not be negative\n")
            config.discovery.nested_depth = args.depth
        if args.docs_path:
            config.discovery.docs_path = args.docs_path

    if args.command == "serve":
        from .service.app import run_service

        run_service(host=args.host, port=args.port, config=config)
        return

    orchestrator = Orchestrator(config)

    try:
        payload = _dispatch(orchestrator, args)
    except ValueError as exc:
        parser.exit(1, f"{exc}\n")
    except OSError as exc:
        # Missing documents and unwritable documentation folders.
        parser.exit(1, f"{exc}\n")
    except GitCommandError as exc:
        parser.exit(1, f"projectbranch {args.command} failed: {exc}\nRun with --verbose for more details.\n")

    if isinstance(payload, str):
        sys.stdout.write(payload)
    else:
        print(json.dumps(payload, indent=2))


def _dispatch(orchestrator: Orchestrator, args: argparse.Namespace) -> Any:
    if args.command == "discover":
        candidates = orchestrator.discover(
            args.roots, include_without_docs=args.include_without_docs
        )
        return [candidate.to_dict() for candidate in candidates]
    if args.command == "catalog":
        return [group.to_dict() for group in orchestrator.catalog(args.roots)]
    if args.command == "map":
        return orchestrator.map_repository(args.repository, args.accessible).to_dict()
    if args.command == "branches":
        return orchestrator.branch_context(args.repository).to_dict()
    if args.command == "switch":
        return orchestrator.switch_branch(args.repository, args.branch).to_dict()
    if args.command == "docs":
        if args.docs_command == "read":
            return orchestrator.read_document(args.docs_path, args.file)
        return orchestrator.append_document(args.docs_path, args.text, args.file)
    raise ValueError(f"Unknown command: {args.command}")  # pragma: no cover - argparse enforces choices


if __name__ == "__main__":
    main(sys.argv[1:])

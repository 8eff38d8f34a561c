"""Local History CLI entry points.
This module exposes record, list, show, and watch commands.
It maps argparse commands onto workspace lifecycle calls.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Sequence

from core.config import LocalHistoryConfig
from core.errors import LocalHistoryError, NotFoundError
from core.types import RevisionId
from workspace.lifecycle import WorkspaceLifecycle
from workspace.save_watcher import run_watch_loop


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="localhistory",
        description="Per-file snapshot history for a workspace",
    )
    parser.add_argument(
        "--root",
        help="Workspace root (defaults to LOCALHISTORY_WORKSPACE_ROOT or the current directory)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_record_command(subparsers)
    _add_list_command(subparsers)
    _add_show_command(subparsers)
    _add_watch_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Local History CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        lifecycle = _open_workspace(args.root)
    except LocalHistoryError as error:
        print(f"error={error}", file=sys.stderr)
        return 2
    try:
        if args.command == "record":
            return _run_record_command(lifecycle, args)
        if args.command == "list":
            return _run_list_command(lifecycle, args)
        if args.command == "show":
            return _run_show_command(lifecycle, args)
        if args.command == "watch":
            return _run_watch_command(lifecycle)
    except LocalHistoryError as error:
        print(f"error={error}", file=sys.stderr)
        return 1
    finally:
        lifecycle.close()
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _open_workspace(root: str | None) -> WorkspaceLifecycle:
    """Open a lifecycle on the requested or default workspace root.

    Args:
        root: Optional root override.

    Returns:
        Open workspace lifecycle.
    """
    lifecycle = WorkspaceLifecycle(LocalHistoryConfig.from_env())
    lifecycle.open(root or os.getenv("LOCALHISTORY_WORKSPACE_ROOT") or os.getcwd())
    return lifecycle


def _run_record_command(lifecycle: WorkspaceLifecycle, args: argparse.Namespace) -> int:
    """Handle record command.

    Args:
        lifecycle: Open workspace lifecycle.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    revision_id = lifecycle.on_document_saved(os.path.abspath(args.path))
    if revision_id is None:
        print(f"not_recorded={args.path}", file=sys.stderr)
        return 1
    print(revision_id)
    return 0


def _run_list_command(lifecycle: WorkspaceLifecycle, args: argparse.Namespace) -> int:
    """Handle list command.

    Args:
        lifecycle: Open workspace lifecycle.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    listing = lifecycle.get_revisions(os.path.abspath(args.path))
    if listing.current is not None:
        print(f"{listing.current.entry_id}\t{listing.current.label}\t{listing.current.size_bytes}")
    for entry in listing.revisions:
        print(f"{entry.entry_id}\t{entry.label}\t{entry.size_bytes}")
    return 0


def _run_show_command(lifecycle: WorkspaceLifecycle, args: argparse.Namespace) -> int:
    """Handle show command.

    Args:
        lifecycle: Open workspace lifecycle.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    try:
        content = lifecycle.read_revision_content(args.revision_id)
    except NotFoundError as error:
        print(f"not_found={error}", file=sys.stderr)
        return 1
    sys.stdout.flush()
    sys.stdout.buffer.write(content)
    sys.stdout.buffer.flush()
    return 0


def _run_watch_command(lifecycle: WorkspaceLifecycle) -> int:
    """Handle watch command until interrupted."""
    print(f"watching={lifecycle.root}", file=sys.stderr)

    def on_recorded(revision_id: RevisionId) -> None:
        print(revision_id, flush=True)

    run_watch_loop(lifecycle, on_recorded)
    return 0


def _add_record_command(subparsers: Any) -> None:
    """Register record subcommand."""
    parser = subparsers.add_parser("record", help="Snapshot the current content of a file")
    parser.add_argument("path", help="File to snapshot")


def _add_list_command(subparsers: Any) -> None:
    """Register list subcommand."""
    parser = subparsers.add_parser("list", help="List revisions of a file, oldest first")
    parser.add_argument("path", help="File whose history to list")


def _add_show_command(subparsers: Any) -> None:
    """Register show subcommand."""
    parser = subparsers.add_parser("show", help="Write a stored revision to stdout")
    parser.add_argument("revision_id", help="Revision id printed by record or list")


def _add_watch_command(subparsers: Any) -> None:
    """Register watch subcommand."""
    subparsers.add_parser("watch", help="Record a revision whenever a workspace file is saved")

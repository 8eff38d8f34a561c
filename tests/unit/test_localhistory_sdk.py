"""Unit tests for the public SDK import surface."""

from __future__ import annotations

import localhistory


def test_sdk_exposes_lifecycle_workflow(workspace_root) -> None:
    """Adapters should drive history through the top-level module only."""
    lifecycle = localhistory.WorkspaceLifecycle(localhistory.LocalHistoryConfig(fsync=False))
    lifecycle.open(workspace_root)
    (workspace_root / "notes.md").write_text("draft", encoding="utf-8")

    revision_id = lifecycle.on_document_saved(workspace_root / "notes.md")

    assert isinstance(revision_id, localhistory.RevisionId)

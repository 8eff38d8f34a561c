"""Unit tests for save notification routing."""

from __future__ import annotations

from datetime import datetime, timezone
import logging

import pytest

from core.config import LocalHistoryConfig
from core.errors import StorageError
from store.revision_store import RevisionStore
from workspace.save_event_router import SaveEventRouter

_T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _active_router(workspace_root) -> SaveEventRouter:
    router = SaveEventRouter(RevisionStore(workspace_root, LocalHistoryConfig(fsync=False)))
    router.activate()
    return router


def test_on_document_saved_records_disk_content(workspace_root) -> None:
    """Saving a tracked file should snapshot its on-disk bytes."""
    router = _active_router(workspace_root)
    target = workspace_root / "a.txt"
    target.write_bytes(b"saved text")

    revision_id = router.on_document_saved(target, _T0)

    store = RevisionStore(workspace_root)
    assert revision_id is not None and store.read_revision_content(revision_id) == b"saved text"


def test_on_document_saved_ignores_outside_paths(workspace_root, tmp_path) -> None:
    """Saves outside the workspace are a silent no-op."""
    router = _active_router(workspace_root)
    outside = tmp_path / "outside.txt"
    outside.write_text("x", encoding="utf-8")

    revision_id = router.on_document_saved(outside, _T0)

    assert revision_id is None and not (workspace_root / ".localhistory").exists()


def test_on_document_saved_ignores_missing_files(workspace_root) -> None:
    """A save notification for a vanished file records nothing."""
    router = _active_router(workspace_root)

    assert router.on_document_saved(workspace_root / "gone.txt", _T0) is None


def test_on_document_saved_ignores_while_inactive(workspace_root) -> None:
    """A deactivated router forwards nothing."""
    router = _active_router(workspace_root)
    router.deactivate()
    (workspace_root / "a.txt").write_text("x", encoding="utf-8")

    assert router.on_document_saved(workspace_root / "a.txt", _T0) is None


def test_storage_failure_is_contained(
    workspace_root, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    """StorageError must be logged and never reach the save action."""
    router = _active_router(workspace_root)
    (workspace_root / "a.txt").write_text("x", encoding="utf-8")

    def _fail(*args, **kwargs):
        raise StorageError("disk full")

    monkeypatch.setattr(RevisionStore, "record_revision", _fail)
    with caplog.at_level(logging.WARNING):
        revision_id = router.on_document_saved(workspace_root / "a.txt", _T0)

    assert revision_id is None and "revision_capture_failed" in caplog.text

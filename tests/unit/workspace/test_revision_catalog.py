"""Unit tests for the read-side revision catalog."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging

import pytest

from core.config import LocalHistoryConfig
from core.errors import StorageError
from store.revision_store import RevisionStore
from workspace.revision_catalog import RevisionCatalog

_T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _catalog(workspace_root, label_format: str = "%Y-%m-%d %H:%M:%S") -> RevisionCatalog:
    config = LocalHistoryConfig(fsync=False, label_format=label_format)
    return RevisionCatalog(RevisionStore(workspace_root, config), config)


def test_get_revisions_lists_history_oldest_first(workspace_root) -> None:
    """Entries should follow capture order and carry revision ids."""
    catalog = _catalog(workspace_root)
    store = RevisionStore(workspace_root, LocalHistoryConfig(fsync=False))
    second = store.record_revision("a.txt", b"v2", _T0 + timedelta(minutes=1))
    first = store.record_revision("a.txt", b"v1", _T0)

    listing = catalog.get_revisions(workspace_root / "a.txt")

    assert [entry.entry_id for entry in listing.revisions] == [str(first), str(second)]


def test_get_revisions_formats_labels(workspace_root) -> None:
    """Labels should render capture time in local time."""
    catalog = _catalog(workspace_root, label_format="%H:%M")
    RevisionStore(workspace_root, LocalHistoryConfig(fsync=False)).record_revision(
        "a.txt", b"v1", _T0
    )

    listing = catalog.get_revisions("a.txt")

    assert listing.revisions[0].label == _T0.astimezone().strftime("%H:%M")


def test_get_revisions_builds_current_entry(workspace_root) -> None:
    """The live file should appear as a synthetic, unpersisted entry."""
    catalog = _catalog(workspace_root)
    (workspace_root / "a.txt").write_bytes(b"live!")

    listing = catalog.get_revisions(workspace_root / "a.txt")

    assert listing.current is not None and (
        listing.current.is_current,
        listing.current.size_bytes,
        listing.revisions,
    ) == (True, 5, ())


def test_current_entry_is_never_persisted(workspace_root) -> None:
    """Building a listing must not create history on disk."""
    catalog = _catalog(workspace_root)
    (workspace_root / "a.txt").write_bytes(b"live")

    catalog.get_revisions(workspace_root / "a.txt")

    assert not (workspace_root / ".localhistory").exists()


def test_get_revisions_without_file_has_no_current(workspace_root) -> None:
    """Missing files yield no current entry and an empty history."""
    catalog = _catalog(workspace_root)

    listing = catalog.get_revisions("missing.txt")

    assert (listing.current, listing.revisions) == (None, ())


def test_get_revisions_outside_root_is_empty(workspace_root, tmp_path) -> None:
    """Out-of-scope reads degrade to an empty history."""
    catalog = _catalog(workspace_root)

    listing = catalog.get_revisions(tmp_path / "elsewhere.txt")

    assert listing.revisions == ()


def test_get_revisions_contains_storage_errors(
    workspace_root, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Listing failures surface as an empty result."""
    catalog = _catalog(workspace_root)

    def _fail(*args, **kwargs):
        raise StorageError("permission denied")

    monkeypatch.setattr(RevisionStore, "list_revisions", _fail)

    assert catalog.get_revisions("a.txt").revisions == ()


def test_read_entry_returns_none_for_unknown_id(workspace_root) -> None:
    """Unknown ids come back as an empty result instead of raising."""
    catalog = _catalog(workspace_root)

    assert catalog.read_entry("a.txt@20240101T120000.000-000") is None


def test_read_entry_contains_storage_errors(
    workspace_root, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    """Unreadable entries come back empty and are logged."""
    catalog = _catalog(workspace_root)

    def _fail(*args, **kwargs):
        raise StorageError("permission denied")

    monkeypatch.setattr(RevisionStore, "read_revision_content", _fail)
    with caplog.at_level(logging.WARNING):
        content = catalog.read_entry("a.txt@20240101T120000.000-000")

    assert content is None and "revision_read_failed" in caplog.text

"""Read-side revision catalog.

Builds presentation-ready listings of a file's history, including a
synthetic entry for the live file that is never persisted.
"""

from __future__ import annotations

from datetime import datetime, timezone
import os
from pathlib import Path

from core.config import LocalHistoryConfig
from core.constants import CURRENT_ENTRY_ID
from core.errors import NotFoundError, OutOfScopeError, StorageError
from core.logging_config import get_logger
from core.types import CatalogEntry, Revision, RevisionListing
from store.revision_store import RevisionStore

_LOGGER = get_logger(__name__)


class RevisionCatalog:
    """Sole read entry point consumed by presentation adapters."""

    def __init__(self, store: RevisionStore, config: LocalHistoryConfig | None = None) -> None:
        self._store = store
        self._config = config or LocalHistoryConfig()

    def get_revisions(self, path: Path | str) -> RevisionListing:
        """Build the history listing for a file.

        Out-of-scope paths and unreadable histories produce an empty
        revision tuple rather than an error.

        Args:
            path: Absolute or workspace-relative file path.

        Returns:
            Listing with the live-file entry and stored revisions, oldest first.
        """
        absolute_path = self._absolute_path(path)
        try:
            revisions = self._store.list_revisions(absolute_path)
        except OutOfScopeError:
            revisions = []
        except StorageError as error:
            _LOGGER.warning("revision_listing_failed", path=str(absolute_path), error=str(error))
            revisions = []
        return RevisionListing(
            path=str(absolute_path),
            current=self._current_entry(absolute_path),
            revisions=tuple(self._revision_entry(absolute_path, item) for item in revisions),
        )

    def read_entry(self, entry_id: str) -> bytes | None:
        """Return stored bytes for a listed revision.

        Unknown ids and unreadable entries both yield None; read failures
        are logged.
        """
        try:
            return self._store.read_revision_content(entry_id)
        except NotFoundError:
            return None
        except StorageError as error:
            _LOGGER.warning("revision_read_failed", entry_id=entry_id, error=str(error))
            return None

    def format_label(self, created_at: datetime) -> str:
        """Render a capture time in local time for display."""
        return created_at.astimezone().strftime(self._config.label_format)

    def _absolute_path(self, path: Path | str) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self._store.workspace_root / candidate
        return Path(os.path.abspath(candidate))

    def _revision_entry(self, absolute_path: Path, revision: Revision) -> CatalogEntry:
        return CatalogEntry(
            entry_id=str(revision.revision_id),
            label=self.format_label(revision.created_at),
            path=str(absolute_path),
            created_at=revision.created_at,
            size_bytes=revision.size_bytes,
        )

    def _current_entry(self, absolute_path: Path) -> CatalogEntry | None:
        # Only files that exist on disk get a live entry.
        try:
            stat_result = absolute_path.stat()
        except OSError:
            return None
        if not absolute_path.is_file():
            return None
        now = datetime.now(timezone.utc)
        return CatalogEntry(
            entry_id=CURRENT_ENTRY_ID,
            label=self.format_label(now),
            path=str(absolute_path),
            created_at=now,
            size_bytes=stat_result.st_size,
            is_current=True,
        )

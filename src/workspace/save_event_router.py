"""Save notification routing.

Decides whether a saved document belongs to the open workspace and
streams its on-disk bytes into the revision store.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from core.errors import OutOfScopeError, StorageError
from core.logging_config import get_logger
from core.types import RevisionId
from store.revision_store import RevisionStore

_LOGGER = get_logger(__name__)


class SaveEventRouter:
    """Forwards in-scope save notifications to a revision store.

    A failed snapshot never propagates to the caller, so the user's save
    action is never interrupted by history capture.
    """

    def __init__(self, store: RevisionStore) -> None:
        self._store = store
        self._active = False

    @property
    def active(self) -> bool:
        """Whether save notifications are currently forwarded."""
        return self._active

    def activate(self) -> None:
        self._active = True

    def deactivate(self) -> None:
        self._active = False

    def on_document_saved(
        self,
        path: Path | str,
        timestamp: datetime | None = None,
    ) -> RevisionId | None:
        """Capture a revision for one saved document.

        Args:
            path: Saved file path.
            timestamp: Optional capture time; defaults to now.

        Returns:
            The recorded revision id, or None when nothing was recorded.
        """
        if not self._active:
            _LOGGER.debug("save_ignored", path=str(path), reason="router_inactive")
            return None
        try:
            relative_path = self._store.resolve_tracked_path(path)
        except OutOfScopeError:
            _LOGGER.debug("save_ignored", path=str(path), reason="out_of_scope")
            return None
        source_path = self._store.workspace_root / relative_path
        if not source_path.is_file():
            _LOGGER.debug("save_ignored", path=relative_path, reason="not_a_file")
            return None
        try:
            with source_path.open("rb") as source:
                return self._store.record_revision(relative_path, source, timestamp)
        except (StorageError, OSError) as error:
            _LOGGER.warning(
                "revision_capture_failed",
                path=relative_path,
                error=str(error),
            )
            return None

"""Workspace lifecycle state machine.

This module binds a revision store to the currently open workspace root
and gates every history operation on the workspace being open.
"""

from __future__ import annotations

from datetime import datetime
import os
from pathlib import Path

from core.config import LocalHistoryConfig
from core.errors import WorkspaceNotOpenError, WorkspaceRootError
from core.logging_config import get_logger
from core.types import Revision, RevisionId, RevisionListing, WorkspaceState
from store.revision_store import RevisionContent, RevisionStore
from workspace.revision_catalog import RevisionCatalog
from workspace.save_event_router import SaveEventRouter

_LOGGER = get_logger(__name__)


class WorkspaceLifecycle:
    """CLOSED/OPEN binding between a workspace root and its history.

    While closed no store exists and every history operation raises
    ``WorkspaceNotOpenError``. Closing discards the in-memory handles only;
    stored revisions are rediscovered on the next open of the same root.
    """

    def __init__(self, config: LocalHistoryConfig | None = None) -> None:
        """Create a closed lifecycle.

        Args:
            config: Runtime configuration shared by store and catalog.
        """
        self._config = config or LocalHistoryConfig.from_env()
        self._store: RevisionStore | None = None
        self._router: SaveEventRouter | None = None
        self._catalog: RevisionCatalog | None = None

    @property
    def config(self) -> LocalHistoryConfig:
        return self._config

    @property
    def state(self) -> WorkspaceState:
        """Current lifecycle state."""
        return "open" if self._store is not None else "closed"

    @property
    def is_open(self) -> bool:
        return self._store is not None

    @property
    def root(self) -> Path:
        """Workspace root of the open workspace."""
        return self.store.workspace_root

    @property
    def store(self) -> RevisionStore:
        if self._store is None:
            raise _not_open_error("access the revision store")
        return self._store

    @property
    def router(self) -> SaveEventRouter:
        if self._router is None:
            raise _not_open_error("route save events")
        return self._router

    @property
    def catalog(self) -> RevisionCatalog:
        if self._catalog is None:
            raise _not_open_error("read revision listings")
        return self._catalog

    def open(self, root_path: Path | str | None) -> bool:
        """Handle an open-workspace event.

        An empty root means a file was opened without a workspace; the
        lifecycle then stays closed. A workspace file such as a solution
        file binds its parent directory.

        Args:
            root_path: Workspace directory or workspace file path.

        Returns:
            True when a workspace was opened.

        Raises:
            WorkspaceRootError: If the root is not an existing directory.
        """
        if root_path is None or not str(root_path).strip():
            _LOGGER.info("workspace_open_skipped", reason="empty_root")
            return False
        workspace_root = _derive_workspace_root(Path(str(root_path).strip()))
        if self.is_open:
            self.close()
        store = RevisionStore(workspace_root, self._config)
        router = SaveEventRouter(store)
        router.activate()
        self._store = store
        self._router = router
        self._catalog = RevisionCatalog(store, self._config)
        _LOGGER.info(
            "workspace_opened",
            root=str(workspace_root),
            repository_root=str(store.repository_root),
        )
        return True

    def close(self) -> None:
        """Handle a close-workspace event; a no-op while already closed."""
        if self._store is None:
            return
        root = self._store.workspace_root
        if self._router is not None:
            self._router.deactivate()
        self._store = None
        self._router = None
        self._catalog = None
        _LOGGER.info("workspace_closed", root=str(root))

    def on_document_saved(self, path: Path | str, timestamp: datetime | None = None) -> RevisionId | None:
        """Forward a save notification to the active router."""
        return self.router.on_document_saved(path, timestamp)

    def record_revision(
        self,
        path: Path | str,
        content: RevisionContent,
        timestamp: datetime | None = None,
    ) -> RevisionId:
        """Record a revision in the open workspace's store."""
        return self.store.record_revision(path, content, timestamp)

    def list_revisions(self, path: Path | str) -> list[Revision]:
        """List revisions from the open workspace's store."""
        return self.store.list_revisions(path)

    def read_revision_content(self, revision_id: RevisionId | str) -> bytes:
        """Read revision bytes from the open workspace's store."""
        return self.store.read_revision_content(revision_id)

    def get_revisions(self, path: Path | str) -> RevisionListing:
        """Build a presentation listing from the open workspace's catalog."""
        return self.catalog.get_revisions(path)


def _derive_workspace_root(root_path: Path) -> Path:
    """Resolve the workspace directory for an open event.

    Raises:
        WorkspaceRootError: If no existing directory can be derived.
    """
    absolute_path = Path(os.path.abspath(root_path.expanduser()))
    if absolute_path.is_file():
        absolute_path = absolute_path.parent
    if not absolute_path.is_dir():
        raise WorkspaceRootError(
            f"Workspace root {absolute_path} does not exist or is not a directory. "
            "Open an existing project directory."
        )
    return absolute_path


def _not_open_error(action: str) -> WorkspaceNotOpenError:
    return WorkspaceNotOpenError(f"Cannot {action}: no workspace is open. Open a workspace first.")

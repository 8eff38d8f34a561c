"""Public SDK surface for Local History.

This module provides a stable import path for editor adapters.
It re-exports the workspace lifecycle, store, and typed models.
"""

from __future__ import annotations

from core.config import LocalHistoryConfig
from core.errors import (
    LocalHistoryError,
    NotFoundError,
    OutOfScopeError,
    StorageError,
    WorkspaceNotOpenError,
    WorkspaceRootError,
)
from core.types import CatalogEntry, Revision, RevisionId, RevisionListing
from store.revision_store import RevisionStore
from workspace.lifecycle import WorkspaceLifecycle
from workspace.revision_catalog import RevisionCatalog
from workspace.save_event_router import SaveEventRouter

__all__ = [
    "CatalogEntry",
    "LocalHistoryConfig",
    "LocalHistoryError",
    "NotFoundError",
    "OutOfScopeError",
    "Revision",
    "RevisionCatalog",
    "RevisionId",
    "RevisionListing",
    "RevisionStore",
    "SaveEventRouter",
    "StorageError",
    "WorkspaceLifecycle",
    "WorkspaceNotOpenError",
    "WorkspaceRootError",
]

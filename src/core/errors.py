"""Local History exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class LocalHistoryError(Exception):
    """Base exception for all Local History failures."""


class LocalHistoryConfigError(LocalHistoryError):
    """Raised for invalid runtime configuration."""


class OutOfScopeError(LocalHistoryError):
    """Raised when a path does not lie underneath the workspace root."""


class StorageError(LocalHistoryError):
    """Raised for revision write, listing, and directory creation failures."""


class NotFoundError(LocalHistoryError):
    """Raised when a revision id does not resolve to a stored entry."""


class WorkspaceNotOpenError(LocalHistoryError):
    """Raised when history is used while no workspace is open."""


class WorkspaceRootError(LocalHistoryError):
    """Raised when an open event carries an unusable workspace root."""

"""Shared typed models.

This module defines immutable data models used by the revision store,
save router, catalog, and CLI to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal

from core.constants import REVISION_ID_SEPARATOR, WINDOW_TITLE
from core.errors import NotFoundError

WorkspaceState = Literal["closed", "open"]


@dataclass(frozen=True, order=True)
class RevisionId:
    """Opaque, ordered identity of one stored revision.

    Attributes:
        relative_path: Tracked file path relative to the workspace root.
        entry_name: Encoded entry name inside the file's history directory.
    """

    relative_path: str
    entry_name: str

    def __str__(self) -> str:
        return f"{self.relative_path}{REVISION_ID_SEPARATOR}{self.entry_name}"

    @classmethod
    def parse(cls, raw_value: str) -> "RevisionId":
        """Parse the textual ``<path>@<entry>`` form of a revision id.

        Args:
            raw_value: Text previously produced by ``str(revision_id)``.

        Returns:
            Parsed revision id.

        Raises:
            NotFoundError: If the text cannot name a revision.
        """
        relative_path, separator, entry_name = raw_value.rpartition(REVISION_ID_SEPARATOR)
        if not separator or not relative_path or not entry_name:
            raise NotFoundError(
                f"Malformed revision id '{raw_value}': expected '<path>{REVISION_ID_SEPARATOR}<entry>'. "
                "Use ids printed by the list command."
            )
        return cls(relative_path=relative_path, entry_name=entry_name)


@dataclass(frozen=True)
class Revision:
    """Immutable snapshot metadata for one saved file state.

    Attributes:
        revision_id: Identity of the stored entry.
        created_at: UTC capture timestamp at millisecond precision.
        sequence: Disambiguator among revisions sharing a timestamp.
        size_bytes: Stored content length.
    """

    revision_id: RevisionId
    created_at: datetime
    sequence: int
    size_bytes: int

    @property
    def relative_path(self) -> str:
        """Tracked file path relative to the workspace root."""
        return self.revision_id.relative_path


@dataclass(frozen=True)
class CatalogEntry:
    """Presentation-ready row for one revision or the live file.

    Attributes:
        entry_id: Revision id text, or ``current`` for the live file.
        label: Human-readable timestamp label.
        path: Absolute path of the tracked file.
        created_at: Capture time, or read time for the live file.
        size_bytes: Content length in bytes.
        is_current: Whether this entry represents the live on-disk file.
    """

    entry_id: str
    label: str
    path: str
    created_at: datetime
    size_bytes: int
    is_current: bool = False


@dataclass(frozen=True)
class RevisionListing:
    """View model handed to the presentation layer.

    Attributes:
        path: Absolute path of the requested file.
        current: Synthetic entry for the live file, when it exists.
        revisions: Stored revisions in ascending order.
    """

    path: str
    current: CatalogEntry | None
    revisions: tuple[CatalogEntry, ...]

    @property
    def title(self) -> str:
        """Caption naming the file this listing belongs to."""
        return f"{WINDOW_TITLE} - {Path(self.path).name}"

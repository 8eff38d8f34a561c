"""Local revision store.

This module persists immutable per-file snapshots under the workspace
repository root and lists or reads them back in chronological order.
"""

from __future__ import annotations

from contextlib import suppress
import os
from datetime import datetime
from pathlib import Path, PurePosixPath
import threading
from typing import BinaryIO
from uuid import uuid4

from core.config import LocalHistoryConfig
from core.constants import ENTRY_SEQUENCE_LIMIT, TEMP_ENTRY_PREFIX, TEMP_ENTRY_SUFFIX
from core.errors import NotFoundError, OutOfScopeError, StorageError
from core.logging_config import get_logger
from core.types import Revision, RevisionId
from store.revision_entry import (
    build_entry_name,
    encode_stamp,
    next_sequence,
    normalize_timestamp,
    parse_entry_name,
)

_LOGGER = get_logger(__name__)

RevisionContent = bytes | bytearray | memoryview | BinaryIO


class RevisionStore:
    """Append-only snapshot store scoped to one workspace root.

    Each tracked file maps to a directory under the repository root that
    mirrors its relative path. Every revision is one file in that
    directory, written to a hidden temp name and hard-linked into place
    under a name no other writer holds.
    """

    def __init__(self, workspace_root: Path | str, config: LocalHistoryConfig | None = None) -> None:
        """Initialize the store for a workspace.

        Args:
            workspace_root: Directory whose files are tracked.
            config: Runtime configuration.
        """
        self._config = config or LocalHistoryConfig()
        self._workspace_root = Path(os.path.abspath(workspace_root))
        self._repository_root = self._workspace_root / self._config.repository_dir_name
        self._finalize_lock = threading.Lock()

    @property
    def workspace_root(self) -> Path:
        """Absolute workspace root this store is bound to."""
        return self._workspace_root

    @property
    def repository_root(self) -> Path:
        """Directory holding all revision histories."""
        return self._repository_root

    def resolve_tracked_path(self, path: Path | str) -> str:
        """Map a file path onto its tracked identity.

        Relative paths are interpreted against the workspace root.

        Args:
            path: Absolute or workspace-relative file path.

        Returns:
            POSIX path relative to the workspace root.

        Raises:
            OutOfScopeError: If the path is outside the workspace, is the
                workspace root, or lies inside the repository root.
        """
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self._workspace_root / candidate
        absolute_path = Path(os.path.abspath(candidate))
        try:
            relative_path = absolute_path.relative_to(self._workspace_root)
        except ValueError as error:
            raise OutOfScopeError(
                f"Path {absolute_path} is outside workspace root {self._workspace_root}."
            ) from error
        if not relative_path.parts:
            raise OutOfScopeError(f"Workspace root {self._workspace_root} is not a tracked file.")
        if relative_path.parts[0] == self._config.repository_dir_name:
            raise OutOfScopeError(
                f"Path {absolute_path} is inside the history repository and is never tracked."
            )
        return relative_path.as_posix()

    def record_revision(
        self,
        path: Path | str,
        content: RevisionContent,
        timestamp: datetime | None = None,
    ) -> RevisionId:
        """Persist a new immutable revision of a tracked file.

        Args:
            path: Tracked file path.
            content: Saved bytes, or a binary stream read in chunks.
            timestamp: Capture time; defaults to now. Naive values are UTC.

        Returns:
            Identity of the finalized revision.

        Raises:
            OutOfScopeError: If the path is not tracked by this workspace.
            StorageError: If the revision cannot be written. No partial
                entry is left visible.
        """
        relative_path = self.resolve_tracked_path(path)
        history_dir = self._history_dir(relative_path)
        stamp = encode_stamp(normalize_timestamp(timestamp))
        _ensure_directory(history_dir)
        temp_path, size_bytes = self._write_temp_entry(history_dir, stamp, content)
        try:
            with self._finalize_lock:
                entry_name = _finalize_entry(history_dir, stamp, temp_path)
        finally:
            _discard(temp_path)
        revision_id = RevisionId(relative_path=relative_path, entry_name=entry_name)
        _LOGGER.info(
            "revision_recorded",
            path=relative_path,
            revision_id=str(revision_id),
            size_bytes=size_bytes,
        )
        return revision_id

    def list_revisions(self, path: Path | str) -> list[Revision]:
        """List stored revisions of a tracked file, oldest first.

        Args:
            path: Tracked file path.

        Returns:
            Ordered revision metadata; empty when the file has no history.

        Raises:
            OutOfScopeError: If the path is not tracked by this workspace.
            StorageError: If the history directory cannot be read.
        """
        relative_path = self.resolve_tracked_path(path)
        history_dir = self._history_dir(relative_path)
        revisions: list[Revision] = []
        for entry in _scan_directory(history_dir):
            parsed = parse_entry_name(entry.name)
            if parsed is None:
                continue
            try:
                if not entry.is_file():
                    continue
                size_bytes = entry.stat().st_size
            except OSError:
                continue
            revisions.append(
                Revision(
                    revision_id=RevisionId(relative_path=relative_path, entry_name=entry.name),
                    created_at=parsed.created_at,
                    sequence=parsed.sequence,
                    size_bytes=size_bytes,
                )
            )
        return sorted(revisions, key=lambda item: item.revision_id.entry_name)

    def read_revision_content(self, revision_id: RevisionId | str) -> bytes:
        """Read the stored bytes of a revision.

        Args:
            revision_id: Revision identity or its textual form.

        Returns:
            Content exactly as it was recorded.

        Raises:
            NotFoundError: If the id does not resolve to a stored entry.
            StorageError: If the entry exists but cannot be read.
        """
        if isinstance(revision_id, str):
            revision_id = RevisionId.parse(revision_id)
        if parse_entry_name(revision_id.entry_name) is None:
            raise NotFoundError(f"Revision {revision_id} is not a valid revision entry.")
        try:
            relative_path = self.resolve_tracked_path(revision_id.relative_path)
        except OutOfScopeError as error:
            raise NotFoundError(f"Revision {revision_id} is not part of this workspace.") from error
        entry_path = self._history_dir(relative_path) / revision_id.entry_name
        try:
            with entry_path.open("rb") as handle:
                return handle.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as error:
            raise NotFoundError(
                f"Revision {revision_id} not found. Use list to discover valid revision ids."
            ) from error
        except OSError as error:
            raise StorageError(f"Failed to read revision {revision_id} at {entry_path}: {error}.") from error

    def _history_dir(self, relative_path: str) -> Path:
        """Return the history directory mirroring a tracked file path."""
        return self._repository_root.joinpath(*PurePosixPath(relative_path).parts)

    def _write_temp_entry(
        self,
        history_dir: Path,
        stamp: str,
        content: RevisionContent,
    ) -> tuple[Path, int]:
        """Write content to a hidden temp entry that listings never show.

        Args:
            history_dir: Tracked file history directory.
            stamp: Encoded timestamp of the revision.
            content: Bytes or binary stream.

        Returns:
            Pair of temp entry path and number of bytes written.

        Raises:
            StorageError: If the temp entry cannot be written; it is removed.
        """
        temp_path = history_dir / f"{TEMP_ENTRY_PREFIX}{stamp}.{uuid4().hex}{TEMP_ENTRY_SUFFIX}"
        try:
            with temp_path.open("xb") as handle:
                size_bytes = _copy_content(content, handle, self._config.chunk_size)
                handle.flush()
                if self._config.fsync:
                    os.fsync(handle.fileno())
        except OSError as error:
            _discard(temp_path)
            raise StorageError(
                f"Failed to write revision content in {history_dir}: {error}. "
                "Check permissions and free disk space under the workspace."
            ) from error
        return temp_path, size_bytes


def _finalize_entry(history_dir: Path, stamp: str, temp_path: Path) -> str:
    """Link a complete temp entry under the next free entry name.

    ``os.link`` refuses an existing target, so an entry claimed by another
    writer between allocation and linking is never replaced; the next
    sequence number is tried instead.

    Raises:
        StorageError: If linking fails or the stamp has no free sequence left.
    """
    while True:
        entry_name = _allocate_entry_name(history_dir, stamp)
        final_path = history_dir / entry_name
        try:
            os.link(temp_path, final_path)
        except FileExistsError:
            continue
        except OSError as error:
            raise StorageError(
                f"Failed to finalize revision entry {final_path}: {error}. "
                "Check permissions under the workspace history directory."
            ) from error
        return entry_name


def _ensure_directory(directory: Path) -> None:
    """Create a history directory if absent; safe under concurrent callers."""
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise StorageError(f"Failed to create history directory {directory}: {error}.") from error


def _allocate_entry_name(history_dir: Path, stamp: str) -> str:
    """Pick the next unused entry name for a stamp.

    Raises:
        StorageError: If every sequence number for the stamp is taken.
    """
    existing_names = [entry.name for entry in _scan_directory(history_dir)]
    sequence = next_sequence(stamp, existing_names)
    if sequence >= ENTRY_SEQUENCE_LIMIT:
        raise StorageError(
            f"Too many revisions in {history_dir} for timestamp {stamp}: "
            f"limit is {ENTRY_SEQUENCE_LIMIT} per millisecond."
        )
    return build_entry_name(stamp, sequence)


def _scan_directory(directory: Path) -> list[os.DirEntry[str]]:
    """List directory entries; a missing directory has none.

    Raises:
        StorageError: If the directory exists but cannot be listed.
    """
    try:
        with os.scandir(directory) as entries:
            return list(entries)
    except (FileNotFoundError, NotADirectoryError):
        return []
    except OSError as error:
        raise StorageError(f"Failed to list history directory {directory}: {error}.") from error


def _copy_content(content: RevisionContent, handle: BinaryIO, chunk_size: int) -> int:
    """Copy bytes or a binary stream into an open file in bounded chunks."""
    if isinstance(content, (bytes, bytearray, memoryview)):
        return handle.write(content)
    size_bytes = 0
    while True:
        chunk = content.read(chunk_size)
        if not chunk:
            return size_bytes
        handle.write(chunk)
        size_bytes += len(chunk)


def _discard(temp_path: Path) -> None:
    """Remove a temp entry once it is linked or abandoned."""
    with suppress(OSError):
        temp_path.unlink()
